"""
Course export to a zip of Markdown files.

Archive layout::

    README.md                          course title, description, table of contents
    {n}-{Chapter_Title}/README.md      chapter title and description
    {n}-{Chapter_Title}/{m}-{Lesson_Title}.md
    materials/{file_name}              every material whose file exists on disk
"""

import io
import logging
import re
import zipfile
from typing import Dict, Iterable, List, Set

from sqlalchemy.orm import Session, selectinload

from lms.core.exceptions import NotFoundError
from lms.models.course import Chapter, Course, Lesson
from lms.models.material import Material
from lms.services.storage import MaterialStorage, safe_file_name

logger = logging.getLogger(__name__)

DEFAULT_CODE_LANGUAGE = "javascript"
CORRECT_MARK = " ✓"
# Fixed entry timestamp so identical input gives identical bytes
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


def sanitize_name(title: str) -> str:
    """Replace every character outside [a-zA-Z0-9] with an underscore."""
    return re.sub(r"[^a-zA-Z0-9]", "_", title)


def toc_anchor(title: str) -> str:
    return re.sub(r"\s+", "-", title.lower())


def chapter_dir_name(chapter: Chapter) -> str:
    return f"{chapter.order_index + 1}-{sanitize_name(chapter.title)}"


def lesson_file_name(lesson: Lesson) -> str:
    return f"{lesson.order_index + 1}-{sanitize_name(lesson.title)}.md"


def archive_file_name(course: Course) -> str:
    return f"{sanitize_name(course.title)}.zip"


def render_course_readme(course: Course) -> str:
    text = f"# {course.title}\n\n"
    if course.description:
        text += f"{course.description}\n\n"
    text += "## Table of Contents\n\n"
    for chapter in course.chapters:
        text += f"- [{chapter.title}](#{toc_anchor(chapter.title)})\n"
        for lesson in chapter.lessons:
            text += f"  - [{lesson.title}](#{toc_anchor(lesson.title)})\n"
    return text


def render_chapter_readme(chapter: Chapter) -> str:
    text = f"# {chapter.title}\n\n"
    if chapter.description:
        text += f"{chapter.description}\n\n"
    return text


def render_lesson(lesson: Lesson) -> str:
    """Markdown for one lesson; only sections whose source field is set are emitted."""
    parts: List[str] = [f"# {lesson.title}\n\n"]

    if lesson.video_url:
        parts.append(f"## Video\n\n[Watch on YouTube]({lesson.video_url})\n\n")

    if lesson.content:
        parts.append(f"## Content\n\n{lesson.content}\n\n")

    if lesson.code_example:
        language = lesson.code_language or DEFAULT_CODE_LANGUAGE
        parts.append(f"## Code Example\n\n```{language}\n{lesson.code_example}\n```\n\n")

    if lesson.questions:
        parts.append("## Assessment Questions\n\n")
        for number, question in enumerate(lesson.questions, start=1):
            parts.append(f"### Question {number}\n\n{question.question}\n\n")
            for index, option in enumerate(question.options or []):
                letter = chr(ord("A") + index)
                mark = CORRECT_MARK if index == question.correct_answer else ""
                parts.append(f"{letter}. {option}{mark}\n")
            if question.explanation:
                parts.append(f"\n**Explanation:** {question.explanation}\n\n")
            parts.append("\n")

    if lesson.assignment:
        parts.append(f"## Practice Assignment\n\n{lesson.assignment}\n\n")

    if lesson.materials:
        parts.append("## Materials\n\n")
        for material in lesson.materials:
            file_name = safe_file_name(material.file_name)
            if file_name:
                parts.append(f"- [{material.title}](../materials/{file_name})\n")

    return "".join(parts)


def collect_material_files(materials: Iterable[Material], storage: MaterialStorage) -> Dict[str, bytes]:
    """Map file name -> bytes for every readable material. Later ids win on name clashes."""
    files: Dict[str, bytes] = {}
    for material in sorted(materials, key=lambda m: m.id):
        if not storage.exists(material.file_path):
            logger.debug(f"Skipping material {material.id}: {material.file_path} not on disk")
            continue
        data = storage.read(material.file_path)
        if data is None:
            logger.warning(f"Skipping material {material.id}: file could not be read")
            continue
        file_name = safe_file_name(material.file_name)
        if file_name is None:
            logger.warning(f"Skipping material {material.id}: unusable file name {material.file_name!r}")
            continue
        files[file_name] = data
    return files


def _write(archive: zipfile.ZipFile, name: str, data) -> None:
    info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
    if name.endswith("/"):
        info.external_attr = (0o40755 << 16) | 0x10  # MS-DOS directory flag
        archive.writestr(info, b"")
        return
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    archive.writestr(info, data.encode("utf-8") if isinstance(data, str) else data)


def _unique_name(name: str, used: Set[str]) -> str:
    """Suffix ``name`` with _2, _3, ... (before any .md extension) until it is not in ``used``."""
    stem, ext = (name[:-3], ".md") if name.endswith(".md") else (name, "")
    candidate, n = name, 1
    while candidate in used:
        n += 1
        candidate = f"{stem}_{n}{ext}"
    used.add(candidate)
    return candidate


def build_course_archive(course: Course, material_files: Dict[str, bytes]) -> bytes:
    """Serialize a loaded course tree plus material bytes into zip bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        _write(archive, "README.md", render_course_readme(course))

        # Chapters or lessons sharing order_index and sanitized title get numbered suffixes
        directories: Set[str] = set()
        for chapter in course.chapters:
            directory = _unique_name(chapter_dir_name(chapter), directories)
            _write(archive, f"{directory}/", b"")
            _write(archive, f"{directory}/README.md", render_chapter_readme(chapter))
            lesson_files: Set[str] = {"README.md"}
            for lesson in chapter.lessons:
                file_name = _unique_name(lesson_file_name(lesson), lesson_files)
                _write(archive, f"{directory}/{file_name}", render_lesson(lesson))

        _write(archive, "materials/", b"")
        for file_name, data in material_files.items():
            _write(archive, f"materials/{file_name}", data)

    return buffer.getvalue()


def load_course_tree(db: Session, course_id: int) -> Course:
    """Course with chapters, lessons, questions and linked materials eagerly loaded."""
    course = (
        db.query(Course)
        .options(
            selectinload(Course.chapters)
            .selectinload(Chapter.lessons)
            .selectinload(Lesson.questions),
            selectinload(Course.chapters)
            .selectinload(Chapter.lessons)
            .selectinload(Lesson.materials),
        )
        .filter(Course.id == course_id)
        .first()
    )
    if course is None:
        raise NotFoundError("Course not found")
    return course


def export_course(db: Session, course_id: int, storage: MaterialStorage) -> bytes:
    """Render ``course_id`` into zip bytes. Raises NotFoundError for an unknown course."""
    course = load_course_tree(db, course_id)
    logger.info(f"Exporting course {course.id} ({course.title})")

    material_files = collect_material_files(db.query(Material).all(), storage)
    data = build_course_archive(course, material_files)

    logger.info(
        f"Exported course {course.id}: {len(course.chapters)} chapters, "
        f"{len(material_files)} material files, {len(data)} bytes"
    )
    return data
