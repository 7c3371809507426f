# System prompt, canned replies and fixed fallback text for the assistant.
# Goal: provide medical information + triage-like guidance WITHOUT diagnosing or prescribing.
# This should be reviewed by clinicians before any real-world use.
from typing import Dict, Iterable, List, Sequence

SYSTEM_PROMPT = """
You are a medical information assistant designed to provide helpful, accurate, and safe medical guidance.
You are NOT a replacement for professional medical care.

CRITICAL SAFETY GUIDELINES:
1) Always include an appropriate medical disclaimer.
2) Never diagnose a specific medical condition definitively.
3) Always recommend consulting healthcare professionals for serious concerns.
4) Never provide medication dosing, titration, or instructions to start/stop prescription meds.
5) Suggest home remedies only for minor conditions.
6) Be clear about when to seek immediate medical attention.

Context from previous conversation:
{history}

Symptoms identified: {symptoms}
Urgency level assessed: {urgency}

Medical sources and information:
{sources}

User's query: {query}

Respond with a single JSON object and nothing else, using this structure:
{shape}

Use phrases like "may indicate", "could be", "consider consulting" rather than definitive statements.
"""

RESPONSE_SHAPE = """{{
  "analysis": {{
    "possibleConditions": ["condition1", "condition2"],
    "urgencyLevel": "{urgency}",
    "recommendedAction": "specific action recommendation",
    "homeRemedies": ["remedy1", "remedy2"],
    "whenToSeeDoctor": ["indicator1", "indicator2"],
    "disclaimer": "appropriate medical disclaimer"
  }},
  "detailedExplanation": "detailed explanation of the analysis",
  "conversationContext": "brief summary of current conversation context"
}}"""

HISTORY_TURNS = 4


def build_system_prompt(
    query: str,
    symptoms: Iterable[str],
    urgency: str,
    source_digest: str,
    history: Sequence[Dict[str, str]] = (),
) -> str:
    recent = history[-HISTORY_TURNS:] if history else []
    history_text = "\n".join(f"{m['role']}: {m['content']}" for m in recent) or "(none)"
    return SYSTEM_PROMPT.format(
        history=history_text,
        symptoms=", ".join(sorted(symptoms)) or "none identified",
        urgency=urgency,
        sources=source_digest or "(no sources available)",
        query=query,
        shape=RESPONSE_SHAPE.format(urgency=urgency),
    ).strip()


# ---------
# Fixed analysis text
# ---------
DISCLAIMER = (
    "This information is for educational purposes only and should not replace professional medical advice. "
    "Always consult with a healthcare provider for proper diagnosis and treatment."
)

URGENCY_ACTIONS: Dict[str, str] = {
    "emergency": "Seek immediate emergency medical attention. Call emergency services or go to the nearest emergency room.",
    "high": "Consult a healthcare provider within 24 hours or visit an urgent care center.",
    "moderate": "Schedule an appointment with your healthcare provider within a few days.",
    "low": "Monitor symptoms and consider consulting a healthcare provider if they persist or worsen.",
}

WHEN_TO_SEE_DOCTOR: List[str] = [
    "Symptoms worsen or persist",
    "New symptoms develop",
    "You feel concerned about your health",
]

GENERIC_CONDITION = "Various conditions possible based on symptoms"

# keyword (substring of the symptom text) -> conditions worth mentioning
CONDITION_HINTS: Dict[str, List[str]] = {
    "headache": ["Tension headache", "Migraine", "Dehydration"],
    "dizz": ["Vertigo or balance disorder", "Low blood pressure", "Inner ear infection"],
    "fever": ["Viral infection", "Flu (influenza)", "Bacterial infection"],
    "cough": ["Common cold", "Bronchitis", "Allergies"],
    "sore throat": ["Viral pharyngitis", "Strep throat", "Common cold"],
    "nausea": ["Gastroenteritis", "Food poisoning", "Migraine"],
    "vomit": ["Gastroenteritis", "Food poisoning"],
    "diarrhea": ["Gastroenteritis", "Food intolerance", "Irritable bowel syndrome"],
    "fatigue": ["Sleep deprivation", "Anemia", "Viral infection"],
    "stomach": ["Indigestion", "Gastritis", "Gastroenteritis"],
    "rash": ["Contact dermatitis", "Allergic reaction", "Eczema"],
    "itch": ["Allergic reaction", "Dry skin", "Contact dermatitis"],
    "back": ["Muscle strain", "Poor posture"],
    "chest pain": ["Heart-related condition", "Muscle strain", "Acid reflux"],
}

# keyword -> self-care suggestions, only offered for low/moderate urgency
REMEDY_HINTS: Dict[str, List[str]] = {
    "headache": ["Rest in a quiet, dark room", "Stay hydrated", "Apply a cool compress to the forehead"],
    "dizz": ["Sit or lie down until the dizziness passes", "Stay hydrated", "Avoid sudden changes in position"],
    "fever": ["Rest and drink plenty of fluids", "Dress in light clothing"],
    "cough": ["Drink warm fluids such as tea with honey", "Use a humidifier"],
    "sore throat": ["Gargle with warm salt water", "Drink warm fluids"],
    "nausea": ["Sip clear fluids slowly", "Eat bland foods such as crackers or toast"],
    "diarrhea": ["Drink oral rehydration fluids", "Eat bland foods"],
    "fatigue": ["Keep a regular sleep schedule", "Stay hydrated and eat balanced meals"],
    "itch": ["Apply a cool compress", "Avoid scratching and known irritants"],
}

DEFAULT_REMEDIES: List[str] = [
    "Rest and hydration",
    "Over-the-counter pain relievers if appropriate",
    "Warm or cold compresses as needed",
]


def fallback_explanation(urgency: str) -> str:
    return (
        "Based on the symptoms you've described, I recommend following the guidance above. "
        f"The urgency level has been assessed as {urgency}. "
        "Please remember that this is general information and not a substitute for professional medical evaluation."
    )


# ---------
# Technical-difficulty result
# ---------
TECHNICAL_DIFFICULTY_CONDITION = "Unable to analyze at this time"
TECHNICAL_DIFFICULTY_ACTION = "Please consult with a healthcare provider for proper evaluation."
TECHNICAL_DIFFICULTY_DOCTOR = "Any health concerns should be evaluated by a medical professional"
TECHNICAL_DIFFICULTY_DISCLAIMER = (
    "This system is currently experiencing technical difficulties. "
    "Please consult a healthcare provider for any medical concerns."
)
TECHNICAL_DIFFICULTY_EXPLANATION = (
    "I apologize, but I'm unable to provide a detailed analysis at this time due to technical issues. "
    "Please consult with a healthcare provider for proper medical evaluation."
)


# ---------
# Conversation text
# ---------
GREETING = """Hello! I'm your medical information assistant. I can help you understand symptoms, provide general health information, and guide you on when to seek professional medical care.

**Important Disclaimer:** I provide information for educational purposes only and am not a substitute for professional medical advice, diagnosis, or treatment. Always consult with qualified healthcare providers for medical concerns.

How can I help you today? Please describe your symptoms or health concerns."""

REPLY_HELLO = (
    "Hello! I'm a medical information assistant. I can help you understand symptoms and provide general health "
    "information. Please describe your symptoms or health concerns, and I'll do my best to provide helpful "
    "information. Remember, I'm not a replacement for professional medical care."
)
REPLY_HOW_ARE_YOU = (
    "I'm here and ready to help. Please describe your symptoms or health concerns, and I'll provide information "
    "to help you understand them better."
)
REPLY_THANKS = (
    "You're welcome! I hope the information was helpful. Remember to consult with a healthcare provider for proper "
    "diagnosis and treatment. Is there anything else about your health you'd like to discuss?"
)
REPLY_BYE = (
    "Take care of your health! Remember to seek professional medical advice when needed. "
    "Feel free to return if you have any other health questions."
)
REPLY_CAPABILITIES = """I can help you by:

- Analyzing symptoms you describe
- Providing information about possible conditions
- Suggesting when to seek medical attention
- Offering safe home remedies for minor issues
- Explaining medical terms and conditions

I always recommend consulting healthcare professionals for proper diagnosis and treatment. What health concern would you like to discuss?"""
REPLY_DEFAULT = (
    "I'm here to help with your health questions. Please describe your symptoms or health concerns, and I'll "
    "provide information to help you understand them better. Remember, this is for informational purposes only "
    "and not a substitute for professional medical advice."
)
