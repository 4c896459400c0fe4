import io
import zipfile

from lms.models import Course, Enrollment, StudentProgress, UserRole
from lms.services.system_settings import ALLOW_STUDENT_REGISTRATION, set_system_setting
from tests.factories import auth_headers, course_lessons, make_course, make_question, make_user

STRONG_PASSWORD = "Sup3r$ecret"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_progress_endpoint_records_and_recomputes(client, db, instructor, student):
    course = make_course(db, instructor, lessons_per_chapter=[4])
    lessons = course_lessons(course)

    for lesson in (lessons[0], lessons[2]):
        response = client.post(
            "/api/progress/",
            json={"studentId": student.id, "lessonId": lesson.id, "completed": True},
            headers=auth_headers(student),
        )
        assert response.status_code == 200

    body = response.json()
    assert body["student_id"] == student.id
    assert body["lesson_id"] == lessons[2].id
    assert body["completed"] is True
    assert body["completed_at"] is not None

    db.expire_all()
    enrollment = db.query(Enrollment).filter_by(student_id=student.id, course_id=course.id).one()
    assert enrollment.progress == 50


def test_progress_endpoint_unknown_lesson(client, db, student):
    response = client.post(
        "/api/progress/",
        json={"student_id": student.id, "lesson_id": 999, "completed": True},
        headers=auth_headers(student),
    )

    assert response.status_code == 404
    assert response.json() == {"message": "Lesson not found"}
    assert db.query(StudentProgress).count() == 0


def test_progress_endpoint_requires_token(client, db, instructor, student):
    course = make_course(db, instructor, lessons_per_chapter=[1])
    payload = {"studentId": student.id, "lessonId": course_lessons(course)[0].id, "completed": True}

    assert client.post("/api/progress/", json=payload).status_code == 401
    bad = client.post("/api/progress/", json=payload, headers={"Authorization": "Bearer junk"})
    assert bad.status_code == 401
    assert "message" in bad.json()


def test_student_cannot_record_for_someone_else(client, db, instructor, student):
    bob = make_user(db, "bob")
    course = make_course(db, instructor, lessons_per_chapter=[1])

    response = client.post(
        "/api/progress/",
        json={"studentId": bob.id, "lessonId": course_lessons(course)[0].id, "completed": True},
        headers=auth_headers(student),
    )

    assert response.status_code == 403


def test_malformed_progress_body_is_400(client, student):
    response = client.post("/api/progress/", json={"studentId": "x"}, headers=auth_headers(student))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"


def test_anonymous_session_can_track_progress(client, db, instructor):
    course = make_course(db, instructor, lessons_per_chapter=[2])
    session = client.post("/api/auth/anonymous").json()
    headers = {"Authorization": f"Bearer {session['access_token']}"}

    response = client.post(
        "/api/progress/",
        json={"studentId": session["user"]["id"], "lessonId": course_lessons(course)[0].id, "completed": True},
        headers=headers,
    )
    rows = client.get(f"/api/progress/student/{session['user']['id']}/course/{course.id}", headers=headers)

    assert response.status_code == 200
    assert [r["completed"] for r in rows.json()] == [True]


def test_export_endpoint(client, db, instructor):
    course = make_course(db, instructor, title="Web Dev 101", lessons_per_chapter=[2, 1])
    make_question(db, course_lessons(course)[0], ["A1", "A2"], 1)

    response = client.get(f"/api/courses/{course.id}/export", headers=auth_headers(instructor))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert response.headers["content-disposition"] == 'attachment; filename="Web_Dev_101.zip"'
    archive = zipfile.ZipFile(io.BytesIO(response.content))
    assert "README.md" in archive.namelist()
    assert "B. A2 ✓" in archive.read("1-Chapter_1/1-Lesson_1_1.md").decode("utf-8")


def test_export_endpoint_gating(client, db, instructor, student):
    course = make_course(db, instructor, lessons_per_chapter=[1])

    assert client.get(f"/api/courses/{course.id}/export").status_code == 401
    assert client.get(f"/api/courses/{course.id}/export", headers=auth_headers(student)).status_code == 403
    missing = client.get("/api/courses/999/export", headers=auth_headers(instructor))
    assert missing.status_code == 404
    assert missing.json() == {"message": "Course not found"}


def test_register_respects_setting(client, db):
    set_system_setting(db, ALLOW_STUDENT_REGISTRATION, "false")
    db.commit()
    payload = {"username": "carol", "email": "carol@example.com", "password": STRONG_PASSWORD}

    refused = client.post("/api/auth/register", json=payload)
    staff = client.post("/api/auth/register-instructor", json=payload)

    assert refused.status_code == 403
    assert refused.json() == {"message": "Student registration is currently disabled"}
    assert staff.status_code == 201
    assert staff.json()["user"]["role"] == "instructor"


def test_register_login_and_me(client):
    payload = {"username": "dana", "email": "dana@example.com", "password": STRONG_PASSWORD}

    registered = client.post("/api/auth/register", json=payload)
    assert registered.status_code == 201
    assert "password" not in str(registered.json()["user"])

    assert client.post("/api/auth/login", json={"username": "dana", "password": "wrong"}).status_code == 401
    login = client.post("/api/auth/login", json={"username": "dana", "password": STRONG_PASSWORD})
    assert login.status_code == 200

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"})
    assert me.json()["username"] == "dana"
    assert me.json()["role"] == "student"


def test_settings_round_trip(client, instructor, student):
    assert client.get("/api/settings/allow_student_registration").json() == {"value": None}

    forbidden = client.put(
        "/api/settings/allow_student_registration", json={"value": "false"}, headers=auth_headers(student)
    )
    assert forbidden.status_code == 403

    client.put("/api/settings/allow_student_registration", json={"value": "false"}, headers=auth_headers(instructor))
    assert client.get("/api/settings/allow_student_registration").json() == {"value": "false"}


def test_course_crud_and_cascade(client, db, instructor):
    headers = auth_headers(instructor)
    course = client.post("/api/courses/", json={"title": "Python"}, headers=headers).json()
    chapter = client.post(
        "/api/chapters/", json={"course_id": course["id"], "title": "Basics"}, headers=headers
    ).json()
    lesson = client.post(
        "/api/lessons/", json={"chapter_id": chapter["id"], "title": "Variables"}, headers=headers
    ).json()
    question = client.post(
        "/api/questions/",
        json={"lesson_id": lesson["id"], "question": "x?", "options": ["a", "b"], "correct_answer": 0},
        headers=headers,
    )
    assert question.status_code == 201

    detail = client.get(f"/api/courses/{course['id']}", headers=headers).json()
    assert detail["chapters"][0]["lessons"][0]["title"] == "Variables"

    assert client.delete(f"/api/courses/{course['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/lessons/{lesson['id']}", headers=headers).status_code == 404


def test_other_instructor_cannot_edit_course(client, db, instructor):
    rival = make_user(db, "rival", role=UserRole.instructor)
    course = make_course(db, instructor, lessons_per_chapter=[1])

    response = client.put(f"/api/courses/{course.id}", json={"title": "Mine"}, headers=auth_headers(rival))

    assert response.status_code == 403


def test_question_answer_must_index_options(client, db, instructor):
    course = make_course(db, instructor, lessons_per_chapter=[1])

    response = client.post(
        "/api/questions/",
        json={"lesson_id": course_lessons(course)[0].id, "question": "?", "options": ["a", "b"], "correct_answer": 2},
        headers=auth_headers(instructor),
    )

    assert response.status_code == 400


def test_enrollment_duplicate_and_course_stats(client, db, instructor, student):
    course = make_course(db, instructor, lessons_per_chapter=[2])
    headers = auth_headers(student)
    payload = {"student_id": student.id, "course_id": course.id}

    first = client.post("/api/enrollments/", json=payload, headers=headers)
    duplicate = client.post("/api/enrollments/", json=payload, headers=headers)
    client.post(
        "/api/progress/",
        json={"studentId": student.id, "lessonId": course_lessons(course)[0].id, "completed": True},
        headers=headers,
    )
    courses = client.get("/api/courses/", headers=headers).json()

    assert first.status_code == 201
    assert first.json()["progress"] == 0
    assert duplicate.status_code == 400
    assert courses[0]["students_count"] == 1
    assert courses[0]["lessons_count"] == 2
    assert courses[0]["average_progress"] == 50


def test_material_upload_link_and_download(client, db, instructor, storage):
    course = make_course(db, instructor, lessons_per_chapter=[1])
    lesson_id = course_lessons(course)[0].id
    headers = auth_headers(instructor)

    uploaded = client.post(
        "/api/materials/",
        files={"file": ("notes.txt", b"hello notes", "text/plain")},
        data={"title": "Notes"},
        headers=headers,
    )
    assert uploaded.status_code == 201
    material_id = uploaded.json()["id"]

    assert client.post(f"/api/materials/{material_id}/link/{lesson_id}", headers=headers).json() == {"success": True}
    details = client.get(f"/api/lessons/{lesson_id}/details", headers=headers).json()
    assert [m["title"] for m in details["materials"]] == ["Notes"]

    download = client.get(f"/api/materials/{material_id}/download", headers=headers)
    assert download.content == b"hello notes"

    archive = zipfile.ZipFile(io.BytesIO(client.get(f"/api/courses/{course.id}/export", headers=headers).content))
    assert archive.read("materials/notes.txt") == b"hello notes"

    assert client.delete(f"/api/materials/{material_id}", headers=headers).status_code == 204
    assert client.get(f"/api/materials/{material_id}/download", headers=headers).status_code == 404


def test_public_catalogue_hides_drafts(client, db, instructor):
    from lms.models import CourseStatus

    published = make_course(db, instructor, title="Open", lessons_per_chapter=[1])
    draft = make_course(db, instructor, title="Hidden", lessons_per_chapter=[1], status=CourseStatus.draft)

    titles = [c["title"] for c in client.get("/api/public/courses").json()]
    assert titles == ["Open"]
    assert client.get(f"/api/public/courses/{published.id}").status_code == 200
    assert client.get(f"/api/public/courses/{draft.id}").status_code == 403
    assert client.get(f"/api/public/lessons/{course_lessons(draft)[0].id}/details").status_code == 404


def test_dashboard_stats(client, db, instructor, student):
    course = make_course(db, instructor, lessons_per_chapter=[2])
    course_lessons(course)[0].assignment = "Build a page"
    db.add(Enrollment(student_id=student.id, course_id=course.id, progress=0))
    db.commit()

    stats = client.get("/api/dashboard/stats", headers=auth_headers(instructor)).json()

    assert stats == {"total_courses": 1, "active_students": 1, "assignments": 1, "materials": 0}


def test_upload_drops_directory_parts_from_file_name(client, db, instructor):
    course = make_course(db, instructor, lessons_per_chapter=[1])
    headers = auth_headers(instructor)

    uploaded = client.post(
        "/api/materials/",
        files={"file": ("../../x.txt", b"sneaky", "text/plain")},
        headers=headers,
    )
    assert uploaded.status_code == 201
    assert uploaded.json()["file_name"] == "x.txt"

    export = client.get(f"/api/courses/{course.id}/export", headers=headers)
    names = zipfile.ZipFile(io.BytesIO(export.content)).namelist()
    assert not [name for name in names if ".." in name]
    assert "materials/x.txt" in names


def test_upload_rejects_dot_only_file_name(client, instructor):
    response = client.post(
        "/api/materials/",
        files={"file": ("..", b"data", "text/plain")},
        headers=auth_headers(instructor),
    )

    assert response.status_code == 400


def test_update_with_null_required_field_is_400(client, db, instructor):
    course = make_course(db, instructor, lessons_per_chapter=[1])
    lesson = course_lessons(course)[0]
    question = make_question(db, lesson, ["a", "b"], 0)
    headers = auth_headers(instructor)

    bad_question = client.put(f"/api/questions/{question.id}", json={"options": None}, headers=headers)
    bad_course = client.put(f"/api/courses/{course.id}", json={"title": None}, headers=headers)
    bad_lesson = client.put(f"/api/lessons/{lesson.id}", json={"order_index": None}, headers=headers)
    bad_chapter = client.put(f"/api/chapters/{course.chapters[0].id}", json={"title": None}, headers=headers)

    for response in (bad_question, bad_course, bad_lesson, bad_chapter):
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"

    # Nullable columns may still be cleared
    cleared = client.put(f"/api/courses/{course.id}", json={"description": None}, headers=headers)
    assert cleared.status_code == 200
    db.expire_all()
    assert db.get(Course, course.id).title == "Web Development"
