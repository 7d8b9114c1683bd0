from google.adk.agents import LlmAgent
from google.genai import types
from . import prompt_pulse
from ..tools.tool_pulse import pulse_report as tool_pulse
from dotenv import load_dotenv
import os
load_dotenv()
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
Model = os.getenv("PULSE_AGENT_MODEL", "gemini-2.5-flash")  # "gemini-2.5-pro"
temperature = 0.4

#───────────────────────────────────────────────────────────────
# Definición del agente de reportes
# ───────────────────────────────────────────────────────────────
agent_pulse = LlmAgent (
    name="agent_pulse",
    model=Model,
    description="Agente especializado en analizar reportes de ventas y labor de restaurantes (CSV/XLSX) y generar KPIs con narrativa.",
    instruction= prompt_pulse.instrucciones_pulse,

    generate_content_config=types.GenerateContentConfig
    (
        temperature= temperature,
    ),

    tools=
    [
        tool_pulse,
    ],
)
