"""sealgate: serve passphrase-encrypted files decrypted on demand."""

__version__ = "0.1.0"
