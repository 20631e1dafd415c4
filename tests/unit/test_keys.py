"""Tests for KeyMaterial loading and the exposed public key forms."""

import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from accountkit.core.config import Settings
from accountkit.core.keys import KeyMaterial, load_key_material


def _write_pair(tmp_path, key_material: KeyMaterial, name: str = "key"):
    private_path = tmp_path / f"{name}_private.pem"
    public_path = tmp_path / f"{name}_public.pem"
    private_path.write_bytes(
        key_material.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    public_path.write_text(key_material.public_key_pem)
    return private_path, public_path


class TestFromPemFiles:
    def test_round_trips_a_generated_pair(self, tmp_path, key_material):
        private_path, public_path = _write_pair(tmp_path, key_material)

        loaded = KeyMaterial.from_pem_files(private_path, public_path)

        assert loaded.public_key_der_base64 == key_material.public_key_der_base64

    def test_rejects_mismatched_halves(self, tmp_path, key_material):
        other = KeyMaterial.generate()
        private_path, _ = _write_pair(tmp_path, key_material, "a")
        _, public_path = _write_pair(tmp_path, other, "b")

        with pytest.raises(ValueError, match="do not form a pair"):
            KeyMaterial.from_pem_files(private_path, public_path)

    def test_rejects_non_rsa_keys(self, tmp_path):
        private_key = ec.generate_private_key(ec.SECP256R1())
        private_path = tmp_path / "ec_private.pem"
        public_path = tmp_path / "ec_public.pem"
        private_path.write_bytes(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        public_path.write_bytes(
            private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

        with pytest.raises(ValueError, match="must be RSA"):
            KeyMaterial.from_pem_files(private_path, public_path)


class TestPublicKeyForms:
    def test_der_base64_loads_as_the_same_public_key(self, key_material):
        der = base64.b64decode(key_material.public_key_der_base64)
        public_key = serialization.load_der_public_key(der)
        assert public_key.public_numbers() == key_material.public_key.public_numbers()

    def test_pem_has_spki_header(self, key_material):
        assert key_material.public_key_pem.startswith("-----BEGIN PUBLIC KEY-----")


class TestLoadKeyMaterial:
    def test_loads_configured_files(self, tmp_path, key_material):
        private_path, public_path = _write_pair(tmp_path, key_material)
        settings = Settings(
            _env_file=None,
            jwt_private_key_path=str(private_path),
            jwt_public_key_path=str(public_path),
        )

        loaded = load_key_material(settings)

        assert loaded.public_key_pem == key_material.public_key_pem

    def test_generates_ephemeral_pair_outside_production(self, caplog):
        settings = Settings(_env_file=None, environment="development")

        loaded = load_key_material(settings)

        assert loaded.public_key.key_size == 2048
        assert "ephemeral" in caplog.text

    def test_refuses_to_generate_in_production(self):
        # Bypass the settings validator to reach the loader's own guard
        settings = Settings.model_construct(
            environment="production",
            jwt_private_key_path="",
            jwt_public_key_path="",
        )
        with pytest.raises(ValueError, match="production"):
            load_key_material(settings)
