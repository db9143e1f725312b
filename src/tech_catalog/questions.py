"""Questionnaire definitions.

Each question is bound to one scoring axis. The features question offers a
single choice; its answer is scored as one value.
"""

from typing import Optional

from .schema import Axis, Question, QuestionOption


QUESTIONS: list[Question] = [
    Question(
        id=Axis.PROJECT_TYPE,
        title="What are you building?",
        description="Select the type of project that best describes your goal.",
        options=[
            QuestionOption(value="webapp", label="Web Application", icon="🌐"),
            QuestionOption(value="api", label="API / Backend Service", icon="⚡"),
            QuestionOption(value="fullstack", label="Full-Stack App", icon="📦"),
            QuestionOption(value="static", label="Static / Marketing Site", icon="📄"),
            QuestionOption(value="mobile", label="Mobile App", icon="📱"),
        ],
    ),
    Question(
        id=Axis.SCALE,
        title="Expected scale?",
        description="How many users do you expect in the first year?",
        options=[
            QuestionOption(value="mvp", label="MVP / Prototype", icon="🚀"),
            QuestionOption(value="small", label="Small (< 1K users)", icon="👥"),
            QuestionOption(value="medium", label="Medium (1K - 100K)", icon="🏢"),
            QuestionOption(value="large", label="Large (100K+)", icon="🌍"),
        ],
    ),
    Question(
        id=Axis.EXPERIENCE,
        title="Team experience level?",
        description="Average skill level of developers on this project.",
        options=[
            QuestionOption(value="beginner", label="Beginner", icon="🌱"),
            QuestionOption(value="intermediate", label="Intermediate", icon="💪"),
            QuestionOption(value="advanced", label="Advanced", icon="🔥"),
        ],
    ),
    Question(
        id=Axis.PRIORITY,
        title="What matters most?",
        description="Choose your primary optimization goal.",
        options=[
            QuestionOption(value="speed", label="Speed to Market", icon="⏱️"),
            QuestionOption(value="performance", label="Performance", icon="📈"),
            QuestionOption(value="cost", label="Low Cost", icon="💰"),
            QuestionOption(value="dx", label="Developer Experience", icon="✨"),
        ],
    ),
    Question(
        id=Axis.FEATURES,
        title="Any special requirements?",
        description="Pick the requirement that matters most for your project.",
        options=[
            QuestionOption(value="realtime", label="Real-time Updates", icon="🔄"),
            QuestionOption(value="seo", label="SEO Critical", icon="🔍"),
            QuestionOption(value="ai", label="AI/ML Integration", icon="🤖"),
            QuestionOption(value="offline", label="Offline Support", icon="📴"),
            QuestionOption(value="none", label="None of these", icon="➖"),
        ],
    ),
]


def get_question(axis: Axis) -> Optional[Question]:
    for question in QUESTIONS:
        if question.id == axis:
            return question
    return None


def validate_answers(answers: dict[str, str]) -> list[str]:
    """Report unknown question ids or answer values.

    Problems are returned, not raised: the scorer still accepts the answers
    and simply gives them no weight.
    """
    problems = []
    for question_id, value in answers.items():
        axis = Axis.from_string(question_id)
        if axis is None:
            problems.append(f"Unknown question '{question_id}'")
            continue
        question = get_question(axis)
        if question and value not in question.option_values():
            allowed = ", ".join(question.option_values())
            problems.append(
                f"Unknown answer '{value}' for '{axis.value}' (expected one of: {allowed})"
            )
    return problems
