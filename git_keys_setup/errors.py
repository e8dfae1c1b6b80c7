"""Fatal errors. Anything raised from here ends the run with exit code 1."""


class SetupError(Exception):
    """Base class for errors that abort a setup run."""


class ConfigurationError(SetupError):
    """Required configuration (git identity, tools on PATH) is missing."""


class ValidationError(SetupError):
    """Operator input was rejected, e.g. passphrases that don't match."""


class KeyGenerationError(SetupError):
    """The key generator failed or produced nothing."""


class KeyLookupError(SetupError, LookupError):
    """A freshly generated key could not be found in the keyring."""


class SigningConfigError(SetupError):
    """Git refused to store the signing configuration."""


class RemoteSyncError(SetupError):
    """The local repository could not be pushed to its remote."""


class SshError(SetupError):
    """ssh-agent refused the key, or GitHub didn't accept it."""
