"""
Chunked blob tables for the database-backed BlobStore.
Laid out like a GridFS bucket: one row per file plus ordered chunk rows.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, LargeBinary, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from resume_matcher.database import Base


class StoredBlob(Base):
    __tablename__ = "stored_blobs"

    id = Column(String(32), primary_key=True)
    filename = Column(String, nullable=False)
    length = Column(Integer, nullable=False)
    chunk_size = Column(Integer, nullable=False)
    blob_metadata = Column("metadata", JSON, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    chunks = relationship(
        "StoredBlobChunk",
        back_populates="blob",
        cascade="all, delete-orphan",
        order_by="StoredBlobChunk.n",
    )


class StoredBlobChunk(Base):
    __tablename__ = "stored_blob_chunks"

    id = Column(Integer, primary_key=True)
    blob_id = Column(String(32), ForeignKey("stored_blobs.id", ondelete="CASCADE"), nullable=False, index=True)
    n = Column(Integer, nullable=False)
    data = Column(LargeBinary, nullable=False)

    blob = relationship("StoredBlob", back_populates="chunks")

    __table_args__ = (
        UniqueConstraint("blob_id", "n", name="uq_blob_chunk_order"),
    )
