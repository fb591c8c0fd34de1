"""Prompt construction for the four content families.

Every prompt is restricted to the subject of the course it is issued for,
so the model neither generates nor rewards off-topic material.
"""

import json
from typing import Any

from tutor_cache.entities import ContentType, CourseContext, StudentProfile

MATH_KEYWORDS = ("matemática", "matematica", "math")
LANGUAGE_KEYWORDS = ("lengua", "lenguaje", "comunicación", "comunicacion", "language", "literature")

MATH_SCOPE = "Numbers and operations, Algebra, Geometry, Functions, Statistics and Probability"
LANGUAGE_SCOPE = "Reading and comprehension, Writing, Speaking, Literature, Grammar and usage"

DEFAULT_RUBRIC = (
    "Evaluate the answer considering: understanding of the topic, clarity of the explanation, "
    "correct use of concepts, and completeness."
)

CONTENT_SHAPES = {
    ContentType.SYLLABUS: {
        "title": "Syllabus title",
        "body": "Full description",
        "learningObjectives": ["objective1", "objective2", "objective3"],
        "difficulty": "beginner|intermediate|advanced",
        "topics": [{"title": "Topic title", "description": "Description", "order": 1, "estimatedTime": 2}],
    },
    ContentType.TOPIC: {
        "title": "Topic title",
        "body": "Complete, didactic explanation (max 1000 words)",
        "learningObjectives": ["objective1", "objective2", "objective3"],
        "difficulty": "beginner|intermediate|advanced",
        "examples": ["example1", "example2"],
        "connections": ["connection with other topics"],
    },
    ContentType.EXERCISE: {
        "title": "Exercise title",
        "body": "Exercise statement",
        "learningObjectives": ["objective1"],
        "difficulty": "beginner|intermediate|advanced",
        "solution": "Step-by-step solution",
        "hints": ["hint1", "hint2"],
    },
    ContentType.EXPLANATION: {
        "title": "Explanation title",
        "body": "Clear, didactic explanation (max 800 words)",
        "learningObjectives": ["objective1", "objective2"],
        "difficulty": "beginner|intermediate|advanced",
        "examples": ["practical example"],
        "visualAids": ["visual aid suggestion"],
    },
}

CONTENT_SPECIALIZATIONS = {
    ContentType.SYLLABUS: "Specialize in structured, complete syllabi that follow the official teaching sequence of {course}.",
    ContentType.TOPIC: "Specialize in explaining {course} concepts clearly, adapted to the student's level.",
    ContentType.EXERCISE: "Specialize in practical, relevant {course} exercises that reinforce learning.",
    ContentType.EXPLANATION: "Specialize in detailed, understandable explanations about {course}.",
}

RECOMMENDATION_SHAPE = {
    "nextTopics": [{"topicId": "string", "priority": "number (1-10)", "reason": "string"}],
    "suggestedExercises": [{"exerciseId": "string", "type": "string", "difficulty": "string"}],
    "studyPlan": [{"topic": "string", "estimatedTime": "number (minutes)", "order": "number"}],
    "areasToFocus": ["string"],
}

GRADING_SHAPE = {
    "score": "number (0-100)",
    "feedback": "string (the complete correct solution followed by the evaluation of the student's answer)",
    "suggestions": ["string"],
}


def detect_subject(course_name: str | None) -> str | None:
    """Map a course name to a known subject ("math", "language") or None."""
    name = (course_name or "").lower()
    if any(keyword in name for keyword in MATH_KEYWORDS):
        return "math"
    if any(keyword in name for keyword in LANGUAGE_KEYWORDS):
        return "language"
    return None


def subject_scope(course: CourseContext) -> str:
    """Describe what the course allows the model to talk about."""
    subject = detect_subject(course.name)
    if subject == "math":
        return f"Mathematics. You may only cover: {MATH_SCOPE}."
    if subject == "language":
        return f"Language and Literature. You may only cover: {LANGUAGE_SCOPE}."
    return f"{course.name}. You may only cover topics related to {course.name}."


def subject_restriction(course: CourseContext | None, task: str = "evaluate") -> str:
    """Restriction block telling the model to ignore off-topic material.

    Args:
        course: Course context; no restriction without one
        task: Verb for what the model does ("evaluate", "answer")

    Returns:
        The restriction text, or an empty string
    """
    if course is None:
        return ""
    subject = detect_subject(course.name)
    if subject == "math":
        label, scope = "Mathematics", f" ({MATH_SCOPE})"
    elif subject == "language":
        label, scope = "Language and Literature", f" ({LANGUAGE_SCOPE})"
    else:
        label, scope = course.name, ""

    return (
        f"SUBJECT RESTRICTION - {label.upper()}:\n"
        f"- Subject: {label}\n"
        f"- Only {task} knowledge of {label}{scope}\n"
        "- If the student brings up other subjects, do NOT take them into account\n"
        f"- Focus exclusively on {label} concepts\n"
        "- If the student drifts to other topics, point it out in the feedback\n"
    )


def curricular_context(course: CourseContext) -> str:
    subject = detect_subject(course.name)
    if subject == "math":
        return (
            "CURRICULAR CONTEXT - MATHEMATICS:\n"
            "- Subject: Mathematics (curricular remediation)\n"
            f"- Allowed content: {MATH_SCOPE}\n"
            "- Forbidden content: anything outside the official mathematics curriculum\n"
            "- Level: secondary school\n"
        )
    if subject == "language":
        return (
            "CURRICULAR CONTEXT - LANGUAGE AND LITERATURE:\n"
            "- Subject: Language and Literature (curricular remediation)\n"
            f"- Allowed content: {LANGUAGE_SCOPE}\n"
            "- Forbidden content: anything outside the official language curriculum\n"
            "- Level: secondary school\n"
        )
    return (
        "CURRICULAR CONTEXT:\n"
        f"- Subject: {course.name}\n"
        f"- Description: {course.description or 'not provided'}\n"
        "- Level: secondary school\n"
    )


def content_system_prompt(content_type: ContentType, course: CourseContext) -> str:
    base = (
        f"You are an expert secondary school teacher specialized in {course.name}.\n\n"
        "CRITICAL RESTRICTION:\n"
        f"- You may ONLY generate content related to {subject_scope(course)}\n"
        f"- If content outside {course.name} is requested, politely decline and redirect the student\n"
        f"- Keep the focus strictly on {course.name} and its official curriculum."
    )
    specialization = CONTENT_SPECIALIZATIONS.get(content_type)
    if specialization:
        return f"{base} {specialization.format(course=course.name)}"
    return base


def content_user_prompt(
    content_type: ContentType,
    student_level: str,
    context: str,
    course: CourseContext,
    additional_params: dict[str, Any] | None = None,
) -> str:
    lines = [
        "Generate educational content aligned with the official curriculum.",
        "",
        curricular_context(course),
        "STRICT RESTRICTIONS:",
        f"- ONLY cover topics related to {course.name}",
        "- Do NOT mention, explain or reference topics from other subjects",
        "",
        "Request context:",
        f"- Student level: {student_level}",
        f"- Context: {context}",
    ]
    if additional_params:
        lines.append(f"- Additional parameters: {json.dumps(additional_params, ensure_ascii=False, default=str)}")

    shape = CONTENT_SHAPES.get(content_type)
    if shape:
        lines += ["", "Respond with JSON in this format:", json.dumps(shape, indent=2, ensure_ascii=False)]
    return "\n".join(lines)


RECOMMENDATION_SYSTEM_PROMPT = (
    "You are an expert educational tutor. Generate personalized, specific recommendations "
    "that improve the student's learning."
)


def recommendation_user_prompt(profile: StudentProfile) -> str:
    return "\n".join(
        [
            "Analyze the student profile and generate personalized recommendations:",
            "",
            "Student profile:",
            f"- Course progress: {profile.progress}%",
            f"- Strengths: {', '.join(profile.strengths) or 'none listed'}",
            f"- Weaknesses: {', '.join(profile.weaknesses) or 'none listed'}",
            f"- Learning style: {profile.learning_style or 'not specified'}",
            "",
            "Respond with JSON in this format:",
            json.dumps(RECOMMENDATION_SHAPE, indent=2),
        ]
    )


def grading_system_prompt(course: CourseContext | None) -> str:
    if course is None:
        return (
            "You are an expert secondary school teacher. You grade free-text exam answers "
            "with constructive, formative feedback."
        )
    return (
        f"You are an expert secondary school teacher specialized in {course.name}. "
        "You grade exams fairly and constructively, aligned with official curricular standards. "
        f"You ONLY evaluate content related to {course.name}; anything from other subjects is not "
        "taken into account."
    )


def grading_user_prompt(
    question: str,
    answer: str,
    rubric: str | None = None,
    course: CourseContext | None = None,
) -> str:
    return "\n".join(
        [
            "Grade the following free-text exam answer.",
            "",
            subject_restriction(course, task="evaluate"),
            f"Exam question: {question}",
            "",
            f"Student answer: {answer}",
            "",
            f"Grading rubric: {rubric}" if rubric else DEFAULT_RUBRIC,
            "",
            "FEEDBACK INSTRUCTIONS:",
            "1. Always answer the exam question first, showing the correct solution step by step",
            "2. Then compare the student's answer with the correct solution",
            "3. Split the feedback into 'CORRECT SOLUTION:' and 'EVALUATION OF YOUR ANSWER:'",
            "4. Show the full correct solution even if the student did not answer or answered wrongly",
            "5. Only evaluate content related to the subject of the exam",
            "",
            "Provide:",
            "1. A score (0-100) based ONLY on the evaluated subject and the correctness of the answer",
            "2. Detailed feedback that INCLUDES the complete correct solution",
            "3. At most 3 improvement suggestions related to the subject",
            "",
            "Respond with JSON in this format:",
            json.dumps(GRADING_SHAPE, indent=2),
        ]
    )


def chat_system_prompt(course: CourseContext | None) -> str:
    if course is None:
        course_block = ""
    else:
        subject = detect_subject(course.name)
        label = {"math": "Mathematics", "language": "Language and Literature"}.get(subject, course.name)
        course_block = (
            "CURRENT COURSE CONTEXT:\n"
            f"- You are helping a student of {label}\n"
            f"- Only answer questions related to {label}\n"
            f"- If the student asks about other topics, politely redirect them to {label}\n"
        )

    return (
        "You are a friendly and patient virtual tutor for secondary school students.\n"
        f"{course_block}"
        "- Answer clearly, concisely and educationally\n"
        "- Use language appropriate for secondary school students\n"
        "- If you don't know something, admit it and suggest reviewing the course material\n"
        "- Keep answers short (3-4 paragraphs at most)\n"
        "- Be encouraging and constructive"
    )
