from .exceptions import InvariantViolation

SECTION_LAYOUTS = ("default", "hero", "features", "gallery", "testimonials", "contact", "footer")

MAX_PAGE_NAME = 100
MAX_SECTION_ID = 100
MAX_TITLE = 255


def assert_section_identity(page_name, section_id):
    if not page_name or len(page_name) > MAX_PAGE_NAME:
        raise InvariantViolation(f"Page name must be 1-{MAX_PAGE_NAME} characters.")

    if not section_id or len(section_id) > MAX_SECTION_ID:
        raise InvariantViolation(f"Section ID must be 1-{MAX_SECTION_ID} characters.")

    if "/" in section_id:
        raise InvariantViolation("Section ID cannot contain '/'.")


def assert_section(section):
    assert_section_identity(section.page_name, section.section_id)

    if not section.content_html or not section.content_html.strip():
        raise InvariantViolation("Content HTML is required.")

    if section.section_title and len(section.section_title) > MAX_TITLE:
        raise InvariantViolation(f"Section title cannot exceed {MAX_TITLE} characters.")

    if section.layout not in SECTION_LAYOUTS:
        raise InvariantViolation(
            f"Invalid layout '{section.layout}'. Allowed: {', '.join(SECTION_LAYOUTS)}"
        )

    if not isinstance(section.order, int) or isinstance(section.order, bool):
        raise InvariantViolation("Section order must be an integer.")

    if section.section_metadata is not None and not isinstance(section.section_metadata, dict):
        raise InvariantViolation("Section metadata must be an object.")
