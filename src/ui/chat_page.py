"""NiceGUI chat interface with live streaming, session sidebar and voice."""

from nicegui import Client, app, ui
from nicegui.events import GenericEventArguments

from src.agent.completion import get_completion_service
from src.client.persistence import PersistenceClient
from src.config import get_server_config
from src.models.schemas import ChatState, Message
from src.sessions.controller import SessionController
from src.sessions.registry import SessionRegistry
from src.ui.speech import (
    START_RECOGNITION_JS,
    STOP_RECOGNITION_JS,
    VoiceInput,
    speak_js,
)

DARK_MODE_KEY = "darkMode"
MIC_ERROR_SECONDS = 5.0
# Plain Enter only; Shift+Enter falls through to the textarea as a newline
SEND_ON_ENTER = "keydown.enter.exact.prevent"

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    .app-container {
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #3b82f6 0%, #6366f1 100%); }

    .message-user {
        background: #3b82f6;
        color: white;
        border-radius: 1.5rem 0.5rem 0.375rem 1.5rem;
    }

    .message-assistant {
        background: white;
        color: #111827;
        border: 1px solid #e5e7eb;
        border-radius: 0.5rem 1.5rem 1.5rem 0.375rem;
        cursor: pointer;
    }
    .body--dark .message-assistant {
        background: #404040;
        color: white;
        border-color: #525252;
    }
    .message-assistant:hover { box-shadow: 0 4px 12px rgba(0, 0, 0, 0.12); }

    .typing-dot {
        width: 8px; height: 8px;
        background: #6366f1;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .stream-cursor { animation: blink 1s step-start infinite; }
    @keyframes blink { 50% { opacity: 0; } }

    .session-active { background: rgba(99, 102, 241, 0.15); }
</style>
"""


def _build_controller() -> SessionController:
    return SessionController(
        registry=SessionRegistry(app.storage.user),
        persistence=PersistenceClient(),
        completion=get_completion_service(),
    )


@ui.page("/")
async def chat_page(client: Client) -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    controller = _build_controller()
    voice = VoiceInput()

    dark = ui.dark_mode(value=app.storage.user.get(DARK_MODE_KEY, False))

    scroll: ui.scroll_area
    input_field: ui.textarea
    send_btn: ui.button
    mic_btn: ui.button
    mic_error: ui.label
    pending_label: ui.label | None = None

    def toggle_dark_mode() -> None:
        dark.set_value(not dark.value)
        app.storage.user[DARK_MODE_KEY] = dark.value

    # === Rendering ===

    def render_message(msg: Message) -> None:
        is_user = msg.is_user
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            box = ui.element("div").classes(f"max-w-[80%] px-4 py-3 shadow {bubble}")
            with box:
                ui.label(msg.content).classes("whitespace-pre-line text-sm leading-relaxed")
            if not is_user:
                box.tooltip("Click to listen")
                box.on("click", lambda content=msg.content: ui.run_javascript(speak_js(content)))

    def render_typing_indicator() -> None:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    @ui.refreshable
    def messages_view() -> None:
        nonlocal pending_label
        pending_label = None
        if controller.loading and not controller.messages:
            render_typing_indicator()
            return
        for msg in controller.messages:
            render_message(msg)
        if controller.state is ChatState.SENDING:
            render_typing_indicator()
        elif controller.state is ChatState.STREAMING:
            with ui.row().classes("w-full justify-start"):
                with ui.element("div").classes("max-w-[80%] px-4 py-3 message-assistant"):
                    with ui.row().classes("items-end gap-0"):
                        pending_label = ui.label(controller.pending).classes(
                            "whitespace-pre-line text-sm leading-relaxed"
                        )
                        ui.label("▋").classes("stream-cursor text-sm")

    def open_rename_dialog(session_id: str, current: str) -> None:
        with ui.dialog() as dialog, ui.card().classes("w-80"):
            ui.label("Rename chat").classes("text-base font-medium")
            name_input = ui.input(value=current).classes("w-full")
            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=dialog.close).props("flat")

                def save() -> None:
                    controller.rename_session(session_id, name_input.value or "")
                    dialog.close()

                ui.button("Save", on_click=save)
        dialog.open()

    @ui.refreshable
    def sidebar_view() -> None:
        for session in controller.list_sessions():
            active = session.id == controller.session_id
            row_classes = "w-full items-center no-wrap rounded px-2 py-1 cursor-pointer"
            if active:
                row_classes += " session-active"
            with ui.row().classes(row_classes):
                ui.icon("chat_bubble_outline").classes("text-gray-500")
                ui.label(session.display_name).classes("flex-grow text-sm truncate").on(
                    "click", lambda s=session: controller.switch_session(s.id)
                )
                ui.button(
                    icon="edit",
                    on_click=lambda s=session: open_rename_dialog(s.id, s.name or ""),
                ).props("flat dense round size=sm")
                ui.button(
                    icon="delete",
                    on_click=lambda s=session: controller.delete_session(s.id),
                ).props("flat dense round size=sm color=negative")

    def on_change() -> None:
        if (
            controller.state is ChatState.STREAMING
            and pending_label is not None
            and not controller.loading
        ):
            pending_label.set_text(controller.pending)
        else:
            messages_view.refresh()
            sidebar_view.refresh()
        if controller.is_busy:
            send_btn.disable()
        else:
            send_btn.enable()
        scroll.scroll_to(percent=1.0)

    # === Actions ===

    async def send_text(text: str) -> None:
        await controller.send_message(text)
        if controller.error:
            ui.notify(controller.error, type="negative")

    async def send_message() -> None:
        text = (input_field.value or "").strip()
        if not text or controller.is_busy:
            return
        input_field.value = ""
        await send_text(text)

    def show_mic_error(message: str) -> None:
        mic_error.set_text(message)
        mic_error.set_visibility(True)
        ui.timer(MIC_ERROR_SECONDS, lambda: mic_error.set_visibility(False), once=True)

    def toggle_recording() -> None:
        mic_error.set_visibility(False)
        if voice.recording:
            ui.run_javascript(STOP_RECOGNITION_JS)
            return
        input_field.value = ""
        ui.run_javascript(START_RECOGNITION_JS)

    def on_speech_start(_: GenericEventArguments) -> None:
        voice.start()
        mic_btn.props("color=red")

    def on_speech_result(e: GenericEventArguments) -> None:
        voice.on_result(e.args.get("interim", ""), e.args.get("final", ""))
        input_field.value = voice.display_text

    def on_speech_error(e: GenericEventArguments) -> None:
        show_mic_error(voice.on_error(e.args.get("error", "unknown")))
        mic_btn.props("color=primary")

    async def on_speech_end(_: GenericEventArguments) -> None:
        mic_btn.props("color=primary")
        text = voice.finish()
        if text and not controller.is_busy:
            input_field.value = ""
            await send_text(text)

    ui.on("speech_start", on_speech_start)
    ui.on("speech_result", on_speech_result)
    ui.on("speech_error", on_speech_error)
    ui.on("speech_end", on_speech_end)

    # === UI Layout ===
    with ui.left_drawer(value=True).classes("p-3 gap-2"):
        ui.button("New chat", icon="add", on_click=controller.new_session).classes("w-full")
        ui.separator()
        sidebar_view()

    with ui.column().classes("w-full max-w-4xl mx-auto app-container").style(
        "height: calc(100vh - 2rem)"
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            ui.label("Chat with AI for parenting advice").classes(
                "text-lg font-semibold text-white"
            )
            ui.button(icon="dark_mode", on_click=toggle_dark_mode).props(
                "flat round color=white"
            )

        # Messages
        with ui.scroll_area().classes("flex-grow w-full") as scroll:
            with ui.column().classes("w-full p-5 gap-4"):
                messages_view()

        # Input
        with ui.column().classes("w-full p-4 gap-1 border-t"):
            with ui.row().classes("w-full gap-2 items-end no-wrap"):
                input_field = (
                    ui.textarea(placeholder="Ask Virtual Parent... (or use the mic)")
                    .props("autogrow outlined dense rows=2")
                    .classes("flex-grow")
                    .on(SEND_ON_ENTER, send_message)
                )
                mic_btn = ui.button(icon="mic", on_click=toggle_recording).props("round")
                send_btn = ui.button("Send", on_click=send_message)
            mic_error = ui.label().classes("text-xs text-red-500")
            mic_error.set_visibility(False)

    unsubscribe = controller.subscribe(on_change)
    client.on_disconnect(unsubscribe)

    await client.connected()
    await controller.start()


def main() -> None:
    """Serve the chat UI on its own; the API must run elsewhere."""
    config = get_server_config()
    ui.run(
        title="Virtual Parent",
        host=config.host,
        port=config.port,
        reload=False,
        show=False,
        storage_secret=config.storage_secret,
    )


if __name__ == "__main__":
    main()
