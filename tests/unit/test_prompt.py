from apps.report.prompt import SYSTEM_INSTRUCTION, build_payload, build_user_query


def test_user_query_joins_skills_in_order():
    skills = ["Adding Fractions", "Place Value", "Telling Time"]
    assert build_user_query(skills) == (
        "Here are the skills I struggled with: Adding Fractions, Place Value, Telling Time"
    )


def test_single_skill_query():
    assert build_user_query(["Rounding"]) == "Here are the skills I struggled with: Rounding"


def test_payload_wire_shape():
    body = build_payload(["Rounding"]).to_request_body()
    assert body == {
        "contents": [{"parts": [{"text": "Here are the skills I struggled with: Rounding"}]}],
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
    }


def test_system_instruction_text():
    assert SYSTEM_INSTRUCTION.startswith("You are a friendly and encouraging 4th-grade teaching assistant.")
    assert "3. A quick, simple example. Do not use external links or URLs." in SYSTEM_INSTRUCTION
