class ExternalServiceFailure(Exception):
    """
    An outbound call (AI generation, video search, problem bank) failed,
    timed out or returned something unusable.

    Callers catch this and substitute locally synthesized content; it is
    never reported to an API client.
    """

    def __init__(self, service, message):
        self.service = service
        self.message = message
        super().__init__(f"{service}: {message}")
