"""bcrypt hashing shared by passwords and one-time codes."""

import bcrypt


class PasswordHasher:
    """Salted one-way hashing with bcrypt's constant-time comparison."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """
        Hash a secret.

        Args:
            secret: Plain text password or code

        Returns:
            bcrypt hash as text
        """
        return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, secret: str, hashed: str) -> bool:
        """
        Check a secret against a stored hash.

        Args:
            secret: Plain text candidate
            hashed: Stored bcrypt hash

        Returns:
            True if the secret matches, False otherwise (malformed hashes included)
        """
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False
