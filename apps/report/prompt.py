"""Prompt text for the skill report."""

from typing import Sequence

from lib.contracts.report import UpstreamPayload


SYSTEM_INSTRUCTION = (
    "You are a friendly and encouraging 4th-grade teaching assistant. "
    "A student just failed a test and needs help with the following skills. "
    "For each skill, please generate a simple, easy-to-understand mini-lesson. "
    "This lesson should include: "
    "1. A simple definition of the skill. "
    "2. A few tips or strategies to help them get the right answer next time. "
    "3. A quick, simple example. "
    "Do not use external links or URLs."
)

USER_QUERY_PREFIX = "Here are the skills I struggled with: "


def build_user_query(skills: Sequence[str]) -> str:
    return USER_QUERY_PREFIX + ", ".join(skills)


def build_payload(skills: Sequence[str]) -> UpstreamPayload:
    return UpstreamPayload(system_instruction=SYSTEM_INSTRUCTION, user_query=build_user_query(skills))
