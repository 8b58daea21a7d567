from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from actionhub.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin


class ApiKey(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """Per-company credential consumed by integration actions.

    ``key`` is the credential identifier declared in an integration's
    ``requiredApiKeys`` (e.g. ``sendgrid_api_key``).
    """

    __tablename__ = "api_keys"
    __table_args__ = (
        UniqueConstraint("company_id", "key", name="uq_api_key_company_key"),
    )

    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    integration: Mapped[str | None] = mapped_column(String(100), nullable=True)
