"""
Metadata for captured live-broadcast video segments.
"""

from sqlalchemy import BigInteger, Column, String, Float, Boolean, DateTime
from app.core.database import Base

class RecordingRow(Base):

    __tablename__ = "recordings"

    id = Column(String(32), primary_key=True)
    taxi_id = Column(String(32), index=True, nullable=False)
    filename = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    duration = Column(Float, nullable=False, default=0)  # seconds
    file_size = Column(BigInteger, nullable=False, default=0)  # bytes
    mime_type = Column(String, nullable=False, default="video/webm")
    recorded_at = Column(DateTime(timezone=True), nullable=False)
    title = Column(String, nullable=True)
    is_processed = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<RecordingRow(id={self.id}, taxi_id={self.taxi_id}, file={self.filename})>"
