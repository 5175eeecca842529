"""
KeyForge -- Password & Passphrase Generation Toolkit
=====================================================

Generates cryptographically sound random passwords, pattern passwords,
PINs and passphrases, scores their strength and produces history records
for an external store.

Modules:
    - keyforge.core.engine: Central generation orchestrator
    - keyforge.core.models: Pydantic data models
    - keyforge.core.errors: Error hierarchy
    - keyforge.generators: Random source, charsets, password and passphrase generators
    - keyforge.analyzers: Strength, crack-time and randomness analysis
    - keyforge.collectors: Word-list providers and cache
    - keyforge.history: History search, filters and statistics
    - keyforge.output: Console and report output
    - keyforge.cli: Click-based command-line interface

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
    - Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
    - Knuth, D. E. (1997). The Art of Computer Programming, Vol. 2,
      Section 3.4.2 (random sampling and shuffling).
"""

__version__ = "1.0.0"
__tool_name__ = "keyforge"
