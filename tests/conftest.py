"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (lesson trees on disk)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_section(order, section_id=None, title=None, **extra):
    """Build a minimal section dictionary."""
    section = {
        "id": section_id or f"section-{order}",
        "order": order,
        "type": extra.pop("type", "theory"),
        "title": title or f"Section {order}",
        "content": extra.pop("content", {"markdown": f"Body of section {order}"}),
    }
    section.update(extra)
    return section


def make_lesson(lesson_id, orders=(1, 2, 3), module_id="module-01-fundamentals", **extra):
    """Build a flat-sections lesson whose sections carry the given orders."""
    lesson = {
        "id": lesson_id,
        "moduleId": module_id,
        "title": extra.pop("title", f"Lesson {lesson_id}"),
        "sections": [make_section(order, section_id=f"{lesson_id}-s{i}") for i, order in enumerate(orders)],
    }
    lesson.update(extra)
    return lesson


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def section_factory():
    """Factory for section dictionaries."""
    return make_section


@pytest.fixture
def lesson_factory():
    """Factory for flat-sections lessons."""
    return make_lesson


@pytest.fixture
def json_writer():
    """Write JSON documents to disk, creating parent directories."""
    return write_json


@pytest.fixture
def no_sleep():
    """Async sleep replacement that records requested delays instead of waiting."""
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    sleep.delays = delays
    return sleep


@pytest.fixture
def canonical_lesson():
    """Provide a lesson already in canonical shape."""
    return {
        "lessonId": "respiratory-anatomy",
        "moduleId": "module-01-fundamentals",
        "title": "Anatomía respiratoria",
        "description": "Vía aérea superior e inferior",
        "lastUpdated": "2024-05-01",
        "authors": ["VentyLab"],
        "reviewers": [],
        "learningObjectives": ["Identify the airway structures"],
        "estimatedTime": 30,
        "difficulty": "beginner",
        "bloomLevel": "understand",
        "sections": [],
        "metadata": {"level": "beginner"},
        "content": {
            "introduction": {"text": "La vía aérea...", "objectives": ["Identify the airway structures"]},
            "theory": {"sections": [{"title": "Tráquea", "content": "..."}], "examples": [], "analogies": []},
            "visualElements": [],
            "practicalCases": [],
            "keyPoints": ["The trachea bifurcates at the carina"],
            "assessment": {"questions": []},
            "references": [],
        },
    }


@pytest.fixture
def flat_lesson():
    """Provide a lesson in the flat sections[] shape."""
    return {
        "id": "lesson-02-gas-exchange",
        "moduleId": "module-01-fundamentals",
        "title": "Intercambio gaseoso",
        "learningObjectives": ["Explain V/Q matching"],
        "sections": [
            {"id": "intro", "order": 1, "type": "introduction", "title": "Introducción",
             "content": {"markdown": "Gas exchange happens in the alveoli."}},
            {"id": "theory-1", "order": 2, "type": "theory", "title": "Difusión",
             "content": {"markdown": "Fick's law...", "media": {"images": [
                 {"id": "alveolus", "url": "/img/alveolus.png", "caption": "Alveolar membrane"}]}}},
            {"id": "case-1", "order": 3, "type": "case", "title": "Caso clínico",
             "content": {"text": "Patient with ARDS", "patientData": {"age": 54},
                         "questions": [{"q": "PaO2/FiO2?"}]}},
            {"id": "summary", "order": 4, "type": "summary", "title": "Resumen",
             "content": {"markdown": "- Diffusion is passive\n* V/Q matters\nNot a bullet"}},
            {"id": "quiz", "order": 5, "type": "quiz", "title": "Quiz",
             "content": {"questions": [{"q": "What drives diffusion?"}],
                         "references": ["West, Respiratory Physiology"]}},
        ],
    }


@pytest.fixture
def legacy_lesson():
    """Provide a pre-schema lesson with Spanish keys."""
    return {
        "Título": "Mecánica respiratoria",
        "Introducción": {"texto": "La mecánica...", "objetivos": ["Definir compliance"]},
        "Conceptos Teóricos": "Compliance y resistencia",
        "Elementos Visuales": [{"name": "Curva P-V"}],
        "Casos Prácticos": [{"id": "caso-1"}],
        "Puntos Clave": ["C = ΔV/ΔP"],
        "Autoevaluación": [{"pregunta": "¿Qué es la compliance?"}],
        "Referencias Bibliográficas": ["Tobin, Principles of Mechanical Ventilation"],
    }
