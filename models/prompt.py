"""Prompt model: audit record of one AI interaction."""

from utils.clock import utcnow

from . import db


PROMPT_TYPES = ("ASSISTANT", "FARM_ANALYZER", "CROP_ANALYZER", "SOIL_ANALYZER")


class Prompt(db.Model):
    """A stored prompt/response pair. Rows are never mutated."""

    __tablename__ = "prompts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = db.Column(db.Enum(*PROMPT_TYPES, name="prompt_type"), nullable=False)
    prompt = db.Column(db.Text, nullable=False)
    response = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="prompts")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "prompt": self.prompt,
            "response": self.response,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
