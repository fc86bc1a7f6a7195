class ContentError(Exception):
    """Base class for content engine errors surfaced to API callers."""

    status_code = 500


class InvariantViolation(ContentError):
    status_code = 400


class SectionNotFound(ContentError):
    status_code = 404

    def __init__(self, page, section_id):
        super().__init__(f"Section '{section_id}' not found on page '{page}'")
        self.page = page
        self.section_id = section_id


class PersistenceFailure(ContentError):
    """A store write failed (validation or connectivity)."""

    status_code = 503


class EditConflict(ContentError):
    """The section changed after the editor loaded it."""

    status_code = 409

    def __init__(self, page, section_id):
        super().__init__(f"Section '{section_id}' on page '{page}' was modified by someone else")
        self.page = page
        self.section_id = section_id
