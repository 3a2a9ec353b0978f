class ArticlePublisherError(Exception):
    """Base class for errors raised by the article store and media gateway."""


class ValidationError(ArticlePublisherError):
    """Required article fields are missing."""


class NotFoundError(ArticlePublisherError):
    """The article id does not resolve to a stored record."""


class MissingFileError(ArticlePublisherError):
    pass


class PayloadTooLargeError(ArticlePublisherError):
    pass


class UploadError(ArticlePublisherError):
    """The media host rejected the upload or could not be reached."""
