"""
Runtime configuration for fast-paillier.
Every value can be overridden through the environment; explicit arguments
passed to an operation always take precedence over these defaults.
"""

import os


# ── Key generation ─────────────────────────────────
# Sizes are per prime: 1536-bit primes give a 3072-bit N.
DEFAULT_PRIME_BITS = int(os.getenv("FAST_PAILLIER_PRIME_BITS", "1536"))
MIN_PRIME_BITS = max(int(os.getenv("FAST_PAILLIER_MIN_PRIME_BITS", "512")), 512)

# 64 rounds -> false positive probability <= 4^-64 = 2^-128
MILLER_RABIN_ROUNDS = max(int(os.getenv("FAST_PAILLIER_MR_ROUNDS", "64")), 64)
SIEVE_PRIMES = int(os.getenv("FAST_PAILLIER_SIEVE_PRIMES", "135"))
PRIME_ATTEMPTS_PER_BIT = int(os.getenv("FAST_PAILLIER_PRIME_ATTEMPTS_PER_BIT", "64"))
SAFE_PRIME_ATTEMPTS_PER_BIT = int(os.getenv("FAST_PAILLIER_SAFE_PRIME_ATTEMPTS_PER_BIT", "1024"))

# ── Sampling ───────────────────────────────────────
SAMPLE_RETRIES = int(os.getenv("FAST_PAILLIER_SAMPLE_RETRIES", "64"))

# ── Fixed-base exponentiation ──────────────────────
EXP_WINDOW_BITS = int(os.getenv("FAST_PAILLIER_EXP_WINDOW", "4"))
