import os
from datetime import date

# Must be set before traincore.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from traincore.database import Base, get_db
from traincore.main import app
from traincore.models import AdminProfile, AttendanceRecord, Batch, Student
from traincore.services.attendance import day_of_week


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def role_headers(role):
    return {"X-Admin-Role": role} if role else {}


@pytest.fixture
def seed(db_session):
    """Two active batches, one upcoming, three students and a week of attendance."""
    batch_a = Batch(id="b-a", batch_code="2024-Q1-A", status="active", current_module=2)
    batch_b = Batch(id="b-b", batch_code="2024-Q1-B", status="active", current_module=1)
    batch_c = Batch(id="b-c", batch_code="2024-Q2-A", status="upcoming", current_module=1)
    db_session.add_all([batch_a, batch_b, batch_c])

    students = [
        Student(id="s-1", student_code="STU-2024-0001", first_name="Ana", last_name="Lima",
                batch_id="b-a", technical_score=8, communication_score=6),
        Student(id="s-2", student_code="STU-2024-0002", first_name="Ben", last_name="Okafor",
                batch_id="b-a", technical_score=9, communication_score=9),
        Student(id="s-3", student_code="STU-2024-0003", first_name="Cy", last_name="Tan",
                batch_id="b-b"),
    ]
    db_session.add_all(students)

    # s-1: 9 of 10 sessions attended, s-2: 7 of 10
    day = date(2024, 3, 1)
    for i in range(10):
        d = date.fromordinal(day.toordinal() + i)
        db_session.add(AttendanceRecord(student_id="s-1", batch_id="b-a", date=d,
                                        day_of_week=day_of_week(d),
                                        status="absent" if i == 0 else "present"))
        db_session.add(AttendanceRecord(student_id="s-2", batch_id="b-a", date=d,
                                        day_of_week=day_of_week(d),
                                        status="absent" if i < 3 else "late"))

    db_session.add_all([
        AdminProfile(user_id="u-root", email="root@example.com", role="super_admin"),
        AdminProfile(user_id="u-ops", email="ops@example.com", role="admin"),
        AdminProfile(user_id="u-view", email="view@example.com", role="viewer"),
    ])
    db_session.commit()
    return {"batches": [batch_a, batch_b, batch_c], "students": students}
