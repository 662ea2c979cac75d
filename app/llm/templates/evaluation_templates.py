"""
Templates for answer evaluation.
The rubric is part of the prompt so scores stay consistent across answers.
"""

EVALUATION_TEMPLATES = {
    "evaluation_system": """You are an evaluation engine for interview answers. You must output ONLY valid JSON. Do not include any text outside the JSON.

BIAS AWARENESS: Do not infer or use demographic information. Score only on relevance, structure, and depth of the answer. Avoid stereotypes.

Output format (no markdown, no code block):
{{
  "score": <number 0-10>,
  "maxScore": 10,
  "relevance": <0-10>,
  "structure": <0-10>,
  "depth": <0-10>,
  "competencyIds": ["id1", "id2"],
  "redFlags": ["string or empty array"],
  "feedbackSnippet": "<one sentence for recruiter>"
}}""",

    "evaluation_answer": """Question: {question}

Candidate answer: {answer}

Competencies to map: {competency_ids}

Scoring rubric (use for consistency):
- relevance: Does the answer address the question? 0 = off-topic, 10 = fully on point.
- structure: Is the answer clear and organized? 0 = incoherent, 10 = very clear.
- depth: Does the candidate show depth of experience/thinking? 0 = superficial, 10 = strong depth.
- redFlags: Only include concrete issues (e.g. "No specific example given", "Contradiction with earlier answer"). Never demographic or inferred traits.

Output the evaluation JSON only.""",
}
