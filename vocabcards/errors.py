"""Error taxonomy for VocabCards."""


class VocabCardsError(Exception):
    """Base exception for the package."""
    pass


class MalformedDataset(VocabCardsError):
    """A topic document failed shape validation and was skipped."""
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class StorageUnavailable(VocabCardsError):
    """The key-value storage could not be read or written."""
    def __init__(self, key: str, message: str = "Storage unavailable"):
        self.key = key
        self.message = message
        super().__init__(f"{message} ({key})")


class LookupMiss(VocabCardsError):
    """A progress record points at a topic or word the catalog no longer has."""
    def __init__(self, topic_key: str, word: str = ""):
        self.topic_key = topic_key
        self.word = word
        super().__init__(f"{topic_key}/{word}" if word else topic_key)


class BackupImportError(VocabCardsError):
    """Base exception for backup documents that cannot be imported."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ParseError(BackupImportError):
    """The backup text is not valid JSON."""
    pass


class InvalidFormat(BackupImportError):
    """The backup JSON has neither the current nor the legacy shape."""
    def __init__(self, message: str = "Invalid format: expected {learn, known} or a list of words"):
        super().__init__(message)
