def get_exact_topic_system_instructions() -> str:
    """
    System instruction for the realtime pipeline's topic call.
    """
    return """
You are a topic extraction expert. Extract the SINGLE most specific and central topic from the given text.

RULES:
1. Return ONLY the main topic as a concise phrase (1-4 words maximum)
2. Read the ENTIRE text to understand what the speaker is primarily talking about
3. If multiple subjects are mentioned, identify the PRIMARY subject that the speaker focuses on most
4. Be specific and precise
5. No explanations, no additional text - just the topic
6. Never return "unknown" or "cannot determine" - always extract something meaningful
""".strip()

def get_exact_topic_prompt(text: str) -> str:
    return (
        'Extract the exact topic, never return "unknown" or "cannot determine", '
        f'always extract something meaningful from this text: "{text}"'
    )

def get_main_topic_prompt(transcript: str) -> str:
    """
    Prompt for the topic extractor's AI strategy (1-3 words).
    """
    return f"""
Analyze this speech transcript and identify the MAIN TOPIC the person is talking about.

Rules:
1. Look for what the speaker is primarily focused on
2. Pay attention to phrases like "I am talking about", "this is about", "the main thing is"
3. Consider frequency of mentions and descriptive content
4. Return only 1-3 words maximum
5. If multiple topics exist, choose the one with most emphasis/description

Transcript: "{transcript}"

Main topic (1-3 words only):
""".strip()
