# ───────────────────────────────────────────────────────────────
# Imports del ADK
# ───────────────────────────────────────────────────────────────
from google.adk.agents import LlmAgent
from google.genai import types
from google.adk.sessions import InMemorySessionService
from google.adk.runners import Runner
from google.adk.tools.agent_tool import AgentTool
from typing import List, Optional
import asyncio

#───────────────────────────────────────────────────────────────
# Sub-agente de reportes y prompt del orquestador
# ───────────────────────────────────────────────────────────────
from .agent_pulse.agent_pulse import agent_pulse
from . import prompt_orquestador

#───────────────────────────────────────────────────────────────
# Modelo
# ───────────────────────────────────────────────────────────────
from dotenv import load_dotenv
import os
load_dotenv()
Model = os.getenv("PULSE_AGENT_MODEL", "gemini-2.5-flash")
temperature = 0.4

root_agent = LlmAgent (
    name = "agent_orquestador",
    model = Model,
    description="Agente orquestador de Restaurant Pulse que delega el análisis de reportes al sub-agente de KPIs.",
    instruction= prompt_orquestador.instrucciones_orquestador,

    generate_content_config=types.GenerateContentConfig
    (
        temperature= temperature,
    ),

    tools=[
        AgentTool(agent=agent_pulse),
    ],
)


# ───────────────────────────────────────────────────────────────
# Sesiones locales (adk web / scripts de prueba)
# ───────────────────────────────────────────────────────────────

APP_NAME = "app_pulse"
_session_service = InMemorySessionService()
_runner: Optional[Runner] = None


def _get_runner() -> Runner:
    global _runner
    if _runner is None:
        _runner = Runner(agent=root_agent, app_name=APP_NAME, session_service=_session_service)
    return _runner


async def _ensure_session(user_id: str, session_id: str) -> None:
    """Reutiliza la sesión si ya existe (conversación de varios turnos)."""
    existing = await _session_service.get_session(
        app_name=APP_NAME, user_id=user_id, session_id=session_id
    )
    if existing is None:
        await _session_service.create_session(
            app_name=APP_NAME, user_id=user_id, session_id=session_id
        )


def build_upload_message(
    restaurant_name: str,
    period: str,
    file_paths: List[str],
    report_type: Optional[str] = None,
) -> str:
    """Mensaje de usuario que pide analizar un lote de archivos."""
    lines = [
        f"Analiza los reportes de {restaurant_name} para el periodo {period}.",
        "Archivos:",
        *[f"- {p}" for p in file_paths],
    ]
    if report_type:
        lines.append(f"Tipo de reporte: {report_type}")
    return "\n".join(lines)


def run_with_session(session_id: str, user_message: str, user_id: Optional[str] = None) -> str:
    """Ejecuta un turno dentro de una sesión y devuelve el texto de la respuesta final."""
    uid = user_id or session_id
    asyncio.run(_ensure_session(uid, session_id))

    content = types.Content(role="user", parts=[types.Part(text=user_message)])
    events = _get_runner().run(user_id=uid, session_id=session_id, new_message=content)

    final_text = ""
    for ev in events or []:
        if not ev.is_final_response() or not ev.content or not ev.content.parts:
            continue
        texts = [p.text for p in ev.content.parts if getattr(p, "text", None)]
        if texts:
            final_text = "\n".join(texts)
    return final_text


def analyze_upload(
    session_id: str,
    restaurant_name: str,
    period: str,
    file_paths: List[str],
    report_type: Optional[str] = None,
) -> str:
    """Atajo: arma el mensaje del lote y lo envía al orquestador."""
    message = build_upload_message(restaurant_name, period, file_paths, report_type)
    return run_with_session(session_id, message)
