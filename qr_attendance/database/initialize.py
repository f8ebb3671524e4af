"""Creates the tables and, optionally, demo reference data.

    python -m qr_attendance.database.initialize [--seed]
"""

import argparse
import logging

from qr_attendance.database.session import Base, SessionLocal, engine
from qr_attendance.models import Admin, Subject, Teacher, TeacherSubject

logger = logging.getLogger(__name__)

DEMO_TEACHERS = [
    {"full_name": "Dr. Anita Rao", "email": "anita.rao@college.edu", "department": "Computer Science", "employee_id": "EMP001"},
    {"full_name": "Prof. Vikram Shah", "email": "vikram.shah@college.edu", "department": "Electronics", "employee_id": "EMP002"},
]

DEMO_SUBJECTS = [
    {"subject_name": "Data Structures", "subject_code": "CS201", "department": "Computer Science", "semester": 3, "credits": 4},
    {"subject_name": "Database Systems", "subject_code": "CS301", "department": "Computer Science", "semester": 5, "credits": 4},
    {"subject_name": "Digital Electronics", "subject_code": "EC202", "department": "Electronics", "semester": 3, "credits": 3},
]

# (teacher email, subject code)
DEMO_ASSIGNMENTS = [
    ("anita.rao@college.edu", "CS201"),
    ("anita.rao@college.edu", "CS301"),
    ("vikram.shah@college.edu", "EC202"),
]


# Create the database tables
def create_tables(bind=engine):
    Base.metadata.create_all(bind=bind)


def seed_reference_data(db):
    """Idempotent: rows that already exist are left alone."""
    teachers = {}
    for data in DEMO_TEACHERS:
        teacher = db.query(Teacher).filter(Teacher.email == data["email"]).first()
        if teacher is None:
            teacher = Teacher(**data)
            db.add(teacher)
        teachers[data["email"]] = teacher

    subjects = {}
    for data in DEMO_SUBJECTS:
        subject = db.query(Subject).filter(Subject.subject_code == data["subject_code"]).first()
        if subject is None:
            subject = Subject(**data)
            db.add(subject)
        subjects[data["subject_code"]] = subject

    if db.query(Admin).filter(Admin.email == "admin@college.edu").first() is None:
        db.add(Admin(full_name="System Admin", email="admin@college.edu"))
    db.flush()

    for email, code in DEMO_ASSIGNMENTS:
        teacher, subject = teachers[email], subjects[code]
        exists = (
            db.query(TeacherSubject)
            .filter_by(teacher_id=teacher.id, subject_id=subject.id)
            .first()
        )
        if not exists:
            db.add(TeacherSubject(teacher_id=teacher.id, subject_id=subject.id))
    db.commit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="load demo teachers and subjects")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    create_tables()
    logger.info("Tables created successfully")
    if args.seed:
        db = SessionLocal()
        try:
            seed_reference_data(db)
        finally:
            db.close()
        logger.info("Demo reference data loaded")
