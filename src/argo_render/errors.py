class ArgoRenderError(Exception):
    """
    Base class for all errors that abort a render job.
    """
