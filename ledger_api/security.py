"""
Security utilities: password hashing and signed credentials.

Two concerns are handled here so they're easy to audit in one place:

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - Argon2id is memory-hard and time-hard, so brute-forcing a leaked hash
     is deliberately slow
   - passlib's CryptContext does the hashing and the constant-time check

2. CREDENTIALS (JSON Web Tokens)
   - Signup and login hand the caller a JWT whose subject ("sub") is the
     account NUMBER, plus an expiry ("exp")
   - Tokens are signed with SECRET_KEY using HMAC (HS256 by default)
   - Nothing is stored server-side: every guarded request re-verifies

Algorithm confusion:
  A token's header names its own signing algorithm. The verifier reads that
  header first and rejects anything outside the HMAC family (e.g. "none" or
  an RS*/ES* algorithm) before attempting signature verification, then
  decodes with the single configured algorithm.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import PasswordSizeError

from ledger_api.config import settings
from ledger_api.exceptions import AuthError, AuthReason


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Raises:
        passlib.exc.PasswordSizeError: If the password exceeds passlib's limit.
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored Argon2 hash.

    Returns False for a mismatch and for an oversized candidate (it can't
    possibly match). A stored hash that can't be parsed raises ValueError.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except PasswordSizeError:
        return False


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------

HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


@dataclass(frozen=True)
class TokenClaims:
    """The verified content of a credential."""
    subject: int
    expires_at: datetime


class TokenIssuer:
    """Mints credentials binding a caller to one account number."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 30):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, account, expires_delta: timedelta | None = None) -> str:
        """
        Create a signed JWT for ``account``.

        The payload contains:
          - "sub": the account number, as a string (JWT requires string subjects)
          - "exp": expiry, ``expires_delta`` from now or the configured default
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expire_minutes)
        expire = datetime.now(timezone.utc) + expires_delta

        to_encode = {"sub": str(account.number), "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)


class TokenVerifier:
    """Checks a credential's algorithm, signature and expiry."""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises:
            AuthError(MALFORMED): The token can't be parsed or lacks a numeric subject.
            AuthError(BAD_SIGNATURE): Wrong algorithm family or signature mismatch.
            AuthError(EXPIRED): The token is past its expiry.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise AuthError(AuthReason.MALFORMED)

        alg = header.get("alg")
        if alg not in HMAC_ALGORITHMS or alg != self.algorithm:
            raise AuthError(AuthReason.BAD_SIGNATURE)

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthError(AuthReason.EXPIRED)
        except JWTError:
            raise AuthError(AuthReason.BAD_SIGNATURE)

        try:
            subject = int(payload["sub"])
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError):
            raise AuthError(AuthReason.MALFORMED)

        return TokenClaims(subject=subject, expires_at=expires_at)


# Process-wide instances built from the injected configuration
token_issuer = TokenIssuer(
    settings.SECRET_KEY,
    algorithm=settings.ALGORITHM,
    expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
)
token_verifier = TokenVerifier(settings.SECRET_KEY, algorithm=settings.ALGORITHM)
