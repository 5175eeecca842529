"""KeyForge generators: secure random source, charsets, passwords and passphrases."""

from keyforge.generators.charset import CharClass, CharsetBuilder
from keyforge.generators.passphrase import PassphraseGenerator
from keyforge.generators.password import PasswordGenerator
from keyforge.generators.secure_random import SecureRandomSource

__all__ = [
    "CharClass",
    "CharsetBuilder",
    "PassphraseGenerator",
    "PasswordGenerator",
    "SecureRandomSource",
]
