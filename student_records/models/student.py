"""
Modèle SQLAlchemy pour la table students.
L'identifiant est le matricule attribué par l'école (immuable).
L'âge est un instantané calculé à l'écriture depuis dob, jamais recalculé à la lecture.
"""

from sqlalchemy import Column, Integer, String

from student_records.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    father_name = Column(String, nullable=True)
    dob = Column(String, nullable=True)  # YYYY-MM-DD
    gender = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    course = Column(String, nullable=True)
    semester = Column(String, nullable=True)
