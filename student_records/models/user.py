"""
Modèle SQLAlchemy pour les comptes utilisateurs.
Un compte élève porte le matricule de sa fiche dans student_id.
"""

from sqlalchemy import Boolean, Column, String, text

from student_records.database import Base


class User(Base):
    __tablename__ = "users"

    username = Column(String, primary_key=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False)  # admin, student
    student_id = Column(String, nullable=True)
    must_change_password = Column(Boolean, nullable=False, default=False, server_default=text("0"))
