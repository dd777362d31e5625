"""
Modèle SQLAlchemy pour les demandes de modification de fiche.
Cycle de vie : OPEN → APPROVED ou OPEN → REJECTED (états terminaux).
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from student_records.database import Base


class EditRequest(Base):
    __tablename__ = "edit_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String, nullable=False, index=True)  # pas de FK : convention seulement
    field = Column(String(32), nullable=False)
    new_value = Column(Text, nullable=True)
    message = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="OPEN")  # OPEN, APPROVED, REJECTED
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    handled_by = Column(String, nullable=True)
    handled_at = Column(DateTime, nullable=True)
    handled_reason = Column(Text, nullable=True)
