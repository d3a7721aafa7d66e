"""Panel controller coordinating the hosted chat widget."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from chatpanel.config import (
    COLOR_SCHEMES,
    SCRIPT_ERROR_EVENT,
    SCRIPT_LOADED_EVENT,
    WIDGET_ELEMENT,
    WORKFLOW_MISSING_MESSAGE,
    ColorScheme,
    PanelSettings,
    get_theme_config,
)
from chatpanel.core.errors import SESSION_FALLBACK_MESSAGE, SessionConfigurationError, SessionError
from chatpanel.core.normalize import (
    QUIZ_SUBMIT,
    SURVEY_SUBMIT,
    WidgetAction,
    build_survey_record,
    extract_quiz_answer,
    normalise_fact_text,
    parse_action,
    render_survey_summary,
)
from chatpanel.domain import ErrorState, FactAction, PanelView, ScriptStatus
from chatpanel.infrastructure import (
    InMemoryWidgetEnvironment,
    SessionClient,
    SubmissionClient,
    WidgetEnvironment,
    WidgetRuntime,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

SCRIPT_UNAVAILABLE_MESSAGE = (
    "ChatKit web component is unavailable. Verify that the script URL is reachable."
)
LOADING_MESSAGE = "Loading assistant session..."
QUIZ_SAVED_TEMPLATE = 'Recorded your answer "{answer}" for quiz "{quiz_id}".'
QUIZ_APOLOGY = "Sorry, couldn't save your answer right now."
SURVEY_APOLOGY = "Sorry, couldn't save your survey right now."

RUNTIME_ERROR_EVENT = "chatkit.error"
RUNTIME_LOG_EVENT = "chatkit.log"

FactSaver = Callable[[FactAction], Awaitable[None] | None]


class PanelController:
    """Owns the lifecycle of one widget instance.

    The controller is driven entirely by callbacks: the host calls
    :meth:`mount` / :meth:`unmount`, the widget runtime calls
    :meth:`get_client_secret`, :meth:`handle_action`,
    :meth:`handle_client_tool` and the ``on_*`` lifecycle hooks. Every
    mutation is gated on the instance being alive, and awaited work that is
    still running at :meth:`unmount` is cancelled.
    """

    def __init__(
        self,
        settings: PanelSettings,
        *,
        environment: WidgetEnvironment,
        session_client: SessionClient,
        submission_client: SubmissionClient,
        on_widget_action: FactSaver,
        on_response_end: Callable[[], None],
        on_theme_request: Callable[[ColorScheme], None],
    ) -> None:
        self._settings = settings
        self._environment = environment
        self._session_client = session_client
        self._submissions = submission_client
        self._on_widget_action = on_widget_action
        self._on_response_end = on_response_end
        self._on_theme_request = on_theme_request

        self._processed_facts: set[str] = set()
        self._alive = True
        self._listening = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._script_timer: asyncio.TimerHandle | None = None
        self._runtime: WidgetRuntime | None = None
        self._inflight: set[asyncio.Future[Any]] = set()
        self._detached: set[asyncio.Future[Any]] = set()

        self.errors = ErrorState()
        self.is_initializing_session = True
        self.script_status = self._probe_script()
        self.instance_key = 0

    @classmethod
    def from_settings(
        cls,
        settings: PanelSettings,
        *,
        environment: WidgetEnvironment | None = None,
        on_widget_action: FactSaver,
        on_response_end: Callable[[], None],
        on_theme_request: Callable[[ColorScheme], None],
    ) -> "PanelController":
        return cls(
            settings,
            environment=environment or InMemoryWidgetEnvironment(),
            session_client=SessionClient(settings.session_endpoint),
            submission_client=SubmissionClient(settings.api_base),
            on_widget_action=on_widget_action,
            on_response_end=on_response_end,
            on_theme_request=on_theme_request,
        )

    # ------------------------------------------------------------------
    # state helpers
    # ------------------------------------------------------------------
    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def processed_facts(self) -> frozenset[str]:
        return frozenset(self._processed_facts)

    @property
    def script_timer_armed(self) -> bool:
        return self._script_timer is not None

    def _set_errors(self, **changes: Any) -> None:
        self.errors = self.errors.update(**changes)

    def _probe_script(self) -> ScriptStatus:
        if self._environment.is_element_registered(WIDGET_ELEMENT):
            return ScriptStatus.READY
        return ScriptStatus.PENDING

    async def _guarded(self, awaitable: Awaitable[T]) -> T:
        task = asyncio.ensure_future(awaitable)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await task

    def _spawn_detached(self, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._detached.add(task)
        task.add_done_callback(self._on_detached_done)

    def _on_detached_done(self, task: asyncio.Future[Any]) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("fact save callback failed", exc_info=exc)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def mount(self) -> None:
        """Start watching for the widget script; call from the running loop."""

        self._alive = True
        self._loop = asyncio.get_running_loop()
        self.errors = ErrorState()
        self._watch_script()
        if not self._settings.is_workflow_configured:
            self._set_errors(session=WORKFLOW_MISSING_MESSAGE, retryable=False)
            self.is_initializing_session = False

    def unmount(self) -> None:
        self._alive = False
        self._stop_watching_script()
        self.detach_runtime()
        for task in list(self._inflight):
            task.cancel()

    def reset(self) -> None:
        """Discard the widget instance and start over."""

        self._processed_facts.clear()
        self.script_status = self._probe_script()
        self.is_initializing_session = True
        self.errors = ErrorState()
        self.instance_key += 1
        self.detach_runtime()
        if self._listening:
            if self.script_status is ScriptStatus.READY:
                self._cancel_script_timer()
            elif self._script_timer is None:
                self._arm_script_timer()
        log.info("panel reset | instance_key=%s script=%s", self.instance_key, self.script_status.value)

    def attach_runtime(self, runtime: WidgetRuntime) -> None:
        self.detach_runtime()
        self._runtime = runtime
        runtime.subscribe(RUNTIME_ERROR_EVENT, self._forward_runtime_error)
        runtime.subscribe(RUNTIME_LOG_EVENT, self._forward_runtime_log)

    def detach_runtime(self) -> None:
        runtime, self._runtime = self._runtime, None
        if runtime is None:
            return
        runtime.unsubscribe(RUNTIME_ERROR_EVENT, self._forward_runtime_error)
        runtime.unsubscribe(RUNTIME_LOG_EVENT, self._forward_runtime_log)

    # ------------------------------------------------------------------
    # script readiness
    # ------------------------------------------------------------------
    def _watch_script(self) -> None:
        if not self._listening:
            self._environment.subscribe(SCRIPT_LOADED_EVENT, self._handle_script_loaded)
            self._environment.subscribe(SCRIPT_ERROR_EVENT, self._handle_script_error)
            self._listening = True

        if self._environment.is_element_registered(WIDGET_ELEMENT):
            self._handle_script_loaded()
        elif self.script_status is ScriptStatus.PENDING:
            self._arm_script_timer()

    def _stop_watching_script(self) -> None:
        if self._listening:
            self._environment.unsubscribe(SCRIPT_LOADED_EVENT, self._handle_script_loaded)
            self._environment.unsubscribe(SCRIPT_ERROR_EVENT, self._handle_script_error)
            self._listening = False
        self._cancel_script_timer()

    def _arm_script_timer(self) -> None:
        if self._loop is None:
            return
        self._cancel_script_timer()
        self._script_timer = self._loop.call_later(self._settings.script_timeout, self._on_script_timeout)

    def _cancel_script_timer(self) -> None:
        if self._script_timer is not None:
            self._script_timer.cancel()
            self._script_timer = None

    def _on_script_timeout(self) -> None:
        self._script_timer = None
        if not self._environment.is_element_registered(WIDGET_ELEMENT):
            self._handle_script_error(SCRIPT_UNAVAILABLE_MESSAGE)

    def _handle_script_loaded(self, detail: Any = None) -> None:
        if not self._alive:
            return
        self._cancel_script_timer()
        self.script_status = ScriptStatus.READY
        self._set_errors(script=None)

    def _handle_script_error(self, detail: Any = None) -> None:
        if not self._alive:
            return
        self._cancel_script_timer()
        self.script_status = ScriptStatus.ERROR
        message = detail if detail is not None else "unknown error"
        log.error("widget script failed | %s", message)
        self._set_errors(script=f"Error: {message}", retryable=False)
        self.is_initializing_session = False

    # ------------------------------------------------------------------
    # session credential
    # ------------------------------------------------------------------
    async def get_client_secret(self, current_secret: str | None = None) -> str:
        """Fetch a credential for first load (no ``current_secret``) or refresh."""

        if not self._settings.is_workflow_configured:
            if self._alive:
                self._set_errors(session=WORKFLOW_MISSING_MESSAGE, retryable=False)
                self.is_initializing_session = False
            raise SessionConfigurationError(WORKFLOW_MISSING_MESSAGE)

        first_load = not current_secret
        if self._alive:
            if first_load:
                self.is_initializing_session = True
            self._set_errors(session=None, integration=None, retryable=False)

        try:
            secret = await self._guarded(
                self._session_client.create_client_secret(self._settings.workflow_id)
            )
        except Exception as exc:
            detail = str(exc) or SESSION_FALLBACK_MESSAGE
            if self._alive:
                self._set_errors(session=detail, retryable=False)
            if isinstance(exc, SessionError):
                raise
            raise SessionError(detail) from exc
        finally:
            if self._alive and first_load:
                self.is_initializing_session = False

        if self._alive:
            self._set_errors(session=None, integration=None)
        return secret

    # ------------------------------------------------------------------
    # widget actions
    # ------------------------------------------------------------------
    async def handle_action(self, action: Any, item: Mapping[str, Any] | None = None) -> dict[str, Any]:
        parsed = parse_action(action, item)
        if parsed.type == QUIZ_SUBMIT:
            return await self._guarded(self._submit_quiz(parsed, item))
        if parsed.type == SURVEY_SUBMIT:
            return await self._guarded(self._submit_survey(parsed))
        return {"ok": True}

    async def _reply(self, text: str, reply_to: str | None) -> None:
        runtime = self._runtime
        if runtime is None:
            return
        await runtime.send_user_message(text, reply=reply_to)

    async def _apologise(self, text: str, reply_to: str | None) -> None:
        try:
            await self._reply(text, reply_to)
        except Exception:
            log.exception("could not deliver apology message")

    async def _submit_quiz(self, action: WidgetAction, item: Mapping[str, Any] | None) -> dict[str, Any]:
        body = extract_quiz_answer(action, item)
        quiz_id, answer = body["quizId"], body["answer"]
        log.info("quiz.submit | quizId=%s answer=%s", quiz_id, answer)
        try:
            await self._submissions.submit_quiz(body)
            await self._reply(QUIZ_SAVED_TEMPLATE.format(answer=answer, quiz_id=quiz_id), action.item_id)
        except Exception as exc:
            log.warning("quiz.submit failed | quizId=%s error=%s", quiz_id, exc)
            await self._apologise(QUIZ_APOLOGY, action.item_id)
        return {"ok": True, "quizId": quiz_id, "answer": answer}

    async def _submit_survey(self, action: WidgetAction) -> dict[str, Any]:
        survey = build_survey_record(action.payload)
        log.debug("skin.survey.submit.payload | %s", action.payload)
        log.info("skin.survey.submit.normalized | %s", survey)
        summary = render_survey_summary(survey)
        try:
            await self._submissions.submit_survey(survey)
            await self._reply(summary, action.item_id)
        except Exception as exc:
            log.warning("skin.survey.submit failed | error=%s", exc)
            await self._apologise(SURVEY_APOLOGY, action.item_id)
        return {"ok": True}

    # ------------------------------------------------------------------
    # client tools
    # ------------------------------------------------------------------
    async def handle_client_tool(self, name: str, params: Mapping[str, Any] | None = None) -> dict[str, bool]:
        params = params or {}
        if name == "switch_theme":
            requested = params.get("theme")
            if requested in COLOR_SCHEMES:
                self._on_theme_request(requested)
                return {"success": True}
            return {"success": False}

        if name == "record_fact":
            fact_id = self._as_text(params.get("fact_id"))
            fact_text = self._as_text(params.get("fact_text"))
            if not fact_id or fact_id in self._processed_facts:
                return {"success": True}
            self._processed_facts.add(fact_id)
            try:
                result = self._on_widget_action(
                    FactAction(fact_id=fact_id, fact_text=normalise_fact_text(fact_text))
                )
            except Exception:
                log.exception("fact save callback failed")
                return {"success": True}
            if inspect.isawaitable(result):
                self._spawn_detached(result)
            return {"success": True}

        return {"success": False}

    @staticmethod
    def _as_text(value: Any) -> str:
        return "" if value is None else str(value)

    # ------------------------------------------------------------------
    # runtime lifecycle hooks
    # ------------------------------------------------------------------
    def on_thread_change(self, thread_id: str | None = None) -> None:
        self._processed_facts.clear()

    def on_response_start(self) -> None:
        if self._alive:
            self._set_errors(integration=None, retryable=False)

    def on_response_end(self) -> None:
        self._on_response_end()

    def on_error(self, error: Any) -> None:
        log.error("ChatKit error | %s", error)

    def on_log(self, name: str, data: Any = None) -> None:
        log.debug("[chatkit] %s %s", name, data)

    def _forward_runtime_error(self, detail: Any) -> None:
        error = detail.get("error") if isinstance(detail, Mapping) else detail
        log.error("ck.error | %s", error)

    def _forward_runtime_log(self, detail: Any) -> None:
        if isinstance(detail, Mapping):
            log.debug("[chatkit.event] %s %s", detail.get("name"), detail.get("data"))
        else:
            log.debug("[chatkit.event] %s", detail)

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def widget_options(self, theme: ColorScheme) -> dict[str, Any]:
        """Options handed to the widget runtime when it is created."""

        return {
            "api": {"get_client_secret": self.get_client_secret},
            "theme": {"color_scheme": theme, **get_theme_config(theme)},
            "start_screen": {
                "greeting": self._settings.greeting,
                "prompts": list(self._settings.starter_prompts),
            },
            "composer": {
                "placeholder": self._settings.placeholder,
                "attachments": {"enabled": True},
            },
            "thread_item_actions": {"feedback": False},
            "widgets": {"on_action": self.handle_action},
            "on_client_tool": self.handle_client_tool,
            "on_response_start": self.on_response_start,
            "on_response_end": self.on_response_end,
            "on_thread_change": self.on_thread_change,
            "on_error": self.on_error,
            "on_log": self.on_log,
        }

    def view(self) -> PanelView:
        blocking = self.errors.blocking
        view = PanelView(
            instance_key=self.instance_key,
            widget_hidden=bool(blocking) or self.is_initializing_session,
            error=blocking,
            fallback_message=None if blocking or not self.is_initializing_session else LOADING_MESSAGE,
            on_retry=self.reset if blocking and self.errors.retryable else None,
        )
        if self._settings.debug:
            log.debug(
                "[PanelController] render state | initializing=%s has_runtime=%s script=%s has_error=%s workflow=%s",
                self.is_initializing_session,
                self._runtime is not None,
                self.script_status.value,
                bool(blocking),
                self._settings.workflow_id,
            )
        return view


__all__ = [
    "LOADING_MESSAGE",
    "PanelController",
    "QUIZ_APOLOGY",
    "SCRIPT_UNAVAILABLE_MESSAGE",
    "SURVEY_APOLOGY",
]
