from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Index

from jobboard.database import Base
from jobboard.database_types import GUID


class ApplicationLog(Base):
    """Append-only audit row, one per application lifecycle transition."""
    __tablename__ = "application_logs"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(GUID, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False)
    
    # Human-readable, e.g. "Status changed from PENDING to ACCEPTED"
    action = Column(String, nullable=False)
    previous_status = Column(String, nullable=True)  # NULL for the submission row
    new_status = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    __table_args__ = (
        Index('idx_application_logs_app_created', 'application_id', 'created_at'),
    )
