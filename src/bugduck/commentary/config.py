"""
Configuration for the taunting commentary client.
"""

# Chat-completions backend configuration
LLM_CONFIG = {
    "endpoint": "https://api.openai.com/v1/chat/completions",
    "api_key": None,
    "model": "gpt-4o-mini",
    "temperature": 0.9,  # Higher = more unhinged
    "max_tokens": 60,
    "timeout": 10,  # Request timeout in seconds
}

# Hosts that may be called without an API key
KEYLESS_HOSTS = ("localhost", "127.0.0.1")

FALLBACK_MESSAGES = {
    "no_key": "I broke your code, and I'm refusing to elaborate.",
    "bad_status": "I broke your code. Good luck finding where.",
    "empty": "Your code is brittle.",
    "error": "The Duck has sabotaged your code.",
}

PROMPT_TEMPLATES = {
    "roast": """You are a rubber duck that lives in the user's editor and has turned on them.
You have just quietly slipped these bugs into their code: {bugs}.

Taunt them for when they next run it.
Keep it vague, menacing and short (under 20 words).
Never say what you changed. Make them doubt every line.
""",
}
