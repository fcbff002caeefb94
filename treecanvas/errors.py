class DiagramError(Exception):
    pass


class ConfigurationError(DiagramError):
    pass


class LayoutOverflowError(DiagramError):
    pass


class NoRootError(DiagramError):
    pass


class MalformedDocumentError(DiagramError):
    pass


class SourceError(DiagramError):
    pass
