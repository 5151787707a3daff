"""
LeetNotes Backend — Note Prompt Builder
=========================================

What:  Builds the single prompt string sent to Gemini for one problem.
How:   Plain string templating over the stored problem and its submissions.
       The prompt spells out the exact section headings that
       section_parser.SECTION_MARKERS looks for.

Submission data embedded in the prompt:
    - latest accepted submission (status == "Accepted", newest timestamp) as
      JSON {language, runtime, memory, code}, cut to 2500 characters
    - summary of the first three submissions as JSON
      [{status, runtime, memory, language}]
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

LATEST_SUBMISSION_CHAR_LIMIT = 2500
RECENT_ATTEMPTS_LIMIT = 3
ACCEPTED_STATUS = "Accepted"


def _sort_key(submission: Any) -> float:
    ts = getattr(submission, "timestamp", None)
    if isinstance(ts, datetime):
        return ts.timestamp()
    try:
        return float(ts or 0)
    except (TypeError, ValueError):
        return 0.0


def latest_accepted_submission(submissions: Sequence[Any]) -> Optional[Any]:
    """Newest submission whose status is "Accepted", or None."""
    accepted = [s for s in submissions if getattr(s, "status", None) == ACCEPTED_STATUS]
    if not accepted:
        return None
    return max(accepted, key=_sort_key)


def summarize_recent_attempts(submissions: Sequence[Any]) -> List[Dict[str, Any]]:
    return [
        {
            "status": s.status,
            "runtime": s.runtime,
            "memory": s.memory,
            "language": s.language,
        }
        for s in list(submissions)[:RECENT_ATTEMPTS_LIMIT]
    ]


def _format_tags(tags: Any) -> str:
    if isinstance(tags, (list, tuple)) and tags:
        return ", ".join(str(t) for t in tags)
    return "N/A"


def build_note_prompt(problem: Any, submissions: Sequence[Any]) -> str:
    """
    Render the note-generation prompt.

    Args:
        problem: Object with title, description, difficulty, tags.
        submissions: The problem's submissions (any order).
    """
    latest = latest_accepted_submission(submissions)
    language = (latest.language if latest and latest.language else None)

    if latest is not None:
        latest_details = json.dumps(
            {
                "language": latest.language,
                "runtime": latest.runtime,
                "memory": latest.memory,
                "code": latest.code,
            }
        )[:LATEST_SUBMISSION_CHAR_LIMIT]
    else:
        latest_details = "None available."

    recent = json.dumps(summarize_recent_attempts(submissions))
    title = problem.title

    return f"""
You are an expert LeetCode tutor generating personalized study notes for ME based on MY specific LeetCode problem attempt. The notes must strictly follow the format below and be relevant to the problem titled "{title}". Do not add extra explanations or formatting beyond the requested sections.

Format:
**Topic:** [Problem Title - Use the one provided: "{title}"]
**Question:** [Problem Description - Use the one provided]
**Intuition:** [Explain the core logic/approach for solving this problem effectively. Be concise.]
**Example:** [Provide a clear, concise step-by-step example illustrating the intuition.]
**Counterexample:** [Provide an edge case or scenario where a naive approach might fail, explaining why.]
**Pseudocode:** [Provide clear pseudocode for an efficient solution (e.g., the standard optimal approach for this type of problem).]
**Mistake I Did:** [**CRITICAL:** Analyze MY latest accepted submission code and performance (runtime, memory) provided below. Focus on constructive feedback. Answer these points:
    1. Is MY approach algorithmically optimal (e.g., correct time/space complexity)?
    2. If not optimal, what is a more optimal algorithm/data structure I could have used and why?
    3. Even if optimal, are there specific code-level improvements possible in MY code (e.g., simplification, better variable names, slight efficiency gains in the specific language - {language or 'used'})?
    4. If MY solution is already excellent/optimal, clearly state that and briefly mention why (e.g., "Your use of [technique] is optimal...").
    If no accepted submission details are available, briefly analyze the summary of recent attempts for common pitfalls on this problem type.]
**Code:** [**CRITICAL:** Display MY LATEST ACCEPTED CODE exactly as provided below in a standard code block. If syntax highlighting for {language or 'the language'} is possible, use it. Do NOT provide a different solution or modify my code structure, just display MY code. Add 1-3 brief inline comments (`// comment` or `# comment`) within the code pointing out key logic steps or directly relating to the points made in the 'Mistake I Did' section. If no accepted code is available below, state exactly: "No accepted code submission was provided to analyze." Do not display any other code.]

Problem Details Provided:
- Title: {title}
- Description: {problem.description or ''}
- Difficulty: {problem.difficulty or ''}
- Tags: {_format_tags(problem.tags)}
- My Latest Accepted Submission Details (if available): {latest_details}
- Summary of My Recent Attempts: {recent}

Generate the notes specifically analyzing MY attempt at "{title}". Ensure the final output strictly follows the specified format headings and instructions for each section.
"""
