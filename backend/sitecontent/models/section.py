from sitecontent.extensions import db
from sitecontent.domain.bilingual import PRIMARY_LANGUAGE, BilingualField
from sitecontent.domain.invariants.section import SECTION_LAYOUTS
from .base import BaseModel, JSONDict



class Section(BaseModel):
    __tablename__ = "content_sections"

    page_name = db.Column(db.String(100), nullable=False, index=True)
    section_id = db.Column(db.String(100), nullable=False, index=True)
    section_title = db.Column(db.String(255), nullable=True)
    content_html = db.Column(db.Text, nullable=False)
    content_translated = db.Column(db.Text, nullable=False, default="")
    order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_visible = db.Column(db.Boolean, nullable=False, default=True)
    layout = db.Column(db.String(20), nullable=False, default="default")  # see SECTION_LAYOUTS
    # "metadata" is reserved on declarative models
    section_metadata = db.Column("metadata", JSONDict, nullable=False, default=dict)

    created_by = db.Column(db.String(36), nullable=True)
    updated_by = db.Column(db.String(36), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("page_name", "section_id", name="uq_section_page_section_id"),
        db.Index("idx_section_page_order", "page_name", "order"),
        db.Index("idx_section_page_flags", "page_name", "is_active", "is_visible"),
    )

    @property
    def is_fallback(self) -> bool:
        return bool((self.section_metadata or {}).get("isFallback"))

    def to_bilingual(self, primary_lang: str = PRIMARY_LANGUAGE) -> BilingualField:
        # placeholder rows record the language content_html was rendered in
        language = (self.section_metadata or {}).get("language", primary_lang)
        if language != primary_lang:
            return BilingualField(self.content_translated, self.content_html)
        return BilingualField(self.content_html, self.content_translated)

    def __repr__(self):
        return f"<Section {self.page_name}/{self.section_id} order={self.order}>"
