"""Interactive command-line interface for MindPalace."""

import uuid
from pathlib import Path

from google import genai
from google.genai import types

from .archive import LocalArchive
from .config import PalaceConfig, build_store, config_from_env
from .errors import InvalidImageError, RequestConstructionError
from .illustration import IllustrationClient
from .images import load_image_file, parse_data_uri
from .logging import configure_event_log, get_event_log
from .models import Method, PalaceResult
from .reasoning import ReasoningClient
from .session import IllustrationSlot, SessionController, SessionState

BANNER = """
╔══════════════════════════════════════════╗
║           🏰 MindPalace v0.1.0           ║
║   Turn what you must learn into images   ║
╚══════════════════════════════════════════╝

Type or paste the material, then /go.

Commands:
  /method <name>   - Palace, Mnemonic, Family or Objects
  /image <path>    - Attach an image of the material
  /clearimage      - Drop the attached image
  /go              - Generate the memory plan
  /new             - Start over with new input
  /history         - List saved plans
  /open <n>        - Show saved plan n
  /draw <n>        - Illustrate point n
  /drawall         - Illustrate every point
  /share [path]    - Print or save the plan as text
  /exit, /quit     - Exit the CLI
  /help            - Show this help
"""


def build_controller(config: PalaceConfig) -> SessionController:
    """Wire the clients and the archive for a configuration."""
    client = genai.Client(
        api_key=config.api_key,
        http_options=types.HttpOptions(timeout=config.timeout_ms),
    )
    return SessionController(
        reasoning=ReasoningClient(client, model=config.model),
        illustration=IllustrationClient(client, model=config.image_model),
        archive=LocalArchive(build_store(config)),
    )


class CLI:
    """Interactive command-line interface for MindPalace."""

    def __init__(
        self,
        controller: SessionController,
        images_dir: Path | None = None,
    ) -> None:
        self.controller = controller
        self.images_dir = images_dir or Path.home() / ".mindpalace" / "images"
        self.session_id = self._new_session_id()
        self.logger = get_event_log()
        self._lines: list[str] = []

    def _new_session_id(self) -> str:
        """Generate a new session ID."""
        return f"cli-{uuid.uuid4().hex[:8]}"

    def _format_result(self, result: PalaceResult) -> str:
        """Format a result for display."""
        output = ["\n" + "─" * 40, f"📜 {result.title}  [{result.method.label}]"]
        if result.summary:
            output.append(result.summary)
        if result.slogan:
            output.append(f"\n🎵 {result.slogan}")

        for i, point in enumerate(result.points, start=1):
            output.append(f"\n{i}. {point.content}")
            output.append(f"   📍 {point.association}: {point.story}")
            output.append(f"   👁  {point.visual_prompt}")

        output.append("─" * 40)
        return "\n".join(output)

    def _format_history(self) -> str:
        """Format the archive snapshot as a numbered list."""
        if not self.controller.entries:
            return "No saved plans yet."
        return "\n".join(
            f"{i}. {entry.title}  ({entry.data.method.label})"
            for i, entry in enumerate(self.controller.entries, start=1)
        )

    def _parse_index(self, arg: str, size: int) -> int | None:
        """Parse a 1-based index argument, printing an error if invalid."""
        try:
            n = int(arg)
        except ValueError:
            n = 0
        if not 1 <= n <= size:
            print(f"❌ Expected a number between 1 and {size}")
            return None
        return n - 1

    def _save_slot(self, slot: IllustrationSlot) -> Path | None:
        """Write a slot's image to the images directory."""
        if slot.image is None:
            return None
        payload = parse_data_uri(slot.image)
        extension = payload.mime_type.split("/")[-1]
        self.images_dir.mkdir(parents=True, exist_ok=True)
        path = self.images_dir / f"{self.session_id}-point-{slot.index + 1}.{extension}"
        path.write_bytes(payload.data)
        return path

    def _report_slot(self, slot: IllustrationSlot) -> None:
        if slot.error is not None:
            print(f"⚠ Point {slot.index + 1}: no image ({slot.error})")
            return
        path = self._save_slot(slot)
        if path is not None:
            print(f"🖼  Point {slot.index + 1}: {path}")

    async def _generate(self) -> None:
        """Run a generation from the buffered input."""
        if self._lines:
            self.controller.set_text("\n".join(self._lines))

        try:
            print("\n🧠 Encoding...")
            result = await self.controller.generate()
        except RequestConstructionError as e:
            print(f"❌ {e}")
            return
        except Exception as e:
            print(f"\n❌ Error: {e}")
            self.logger.log("error", session_id=self.session_id, error=str(e))
            return

        if result is None:
            print(f"\n❌ {self.controller.error}")
            return

        self._lines = []
        print(self._format_result(result))

    async def _draw(self, arg: str) -> None:
        result = self.controller.result
        if result is None:
            print("❌ Generate or open a plan first")
            return
        index = self._parse_index(arg, len(result.points))
        if index is None:
            return
        print("🎨 Drawing...")
        self._report_slot(await self.controller.illustrate(index))

    async def _draw_all(self) -> None:
        if self.controller.result is None:
            print("❌ Generate or open a plan first")
            return
        print("🎨 Drawing every point...")
        for slot in await self.controller.illustrate_all():
            self._report_slot(slot)

    def _share(self, arg: str) -> None:
        if self.controller.result is None:
            print("❌ Generate or open a plan first")
            return
        text = self.controller.share_text()
        if not arg:
            print("\n" + text)
            return
        path = Path(arg).expanduser()
        path.write_text(text + "\n", encoding="utf-8")
        print(f"✓ Saved to {path}")

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        name, _, arg = command.strip().partition(" ")
        name = name.lower()
        arg = arg.strip()

        if name in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            self.logger.log("session_end", session_id=self.session_id)
            return False

        if name == "/help":
            print(BANNER)
        elif name == "/method":
            try:
                self.controller.set_method(Method.parse(arg))
            except ValueError:
                print(f"❌ Unknown method. Choose one of: {', '.join(m.label for m in Method)}")
            else:
                print(f"✓ Method: {self.controller.method.label}")
        elif name == "/image":
            try:
                self.controller.attach_image(load_image_file(arg))
            except InvalidImageError as e:
                print(f"❌ {e}")
            else:
                print("📸 Image attached")
        elif name == "/clearimage":
            self.controller.clear_image()
            print("✓ Image removed")
        elif name == "/go":
            await self._generate()
        elif name == "/new":
            self.controller.new_input()
            self.controller.set_text("")
            self._lines = []
            print("✓ Ready for new input")
        elif name == "/history":
            print(self._format_history())
        elif name == "/open":
            index = self._parse_index(arg, len(self.controller.entries))
            if index is not None:
                entry = self.controller.entries[index]
                print(self._format_result(self.controller.select_entry(entry.id)))
        elif name == "/draw":
            await self._draw(arg)
        elif name == "/drawall":
            await self._draw_all()
        elif name == "/share":
            self._share(arg)

        return True  # Unknown command, continue

    def _prompt(self) -> str:
        if self.controller.state is SessionState.READY:
            return "plan> "
        return f"{self.controller.method.label.lower()}> "

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        self.logger.set_session_id(self.session_id)
        self.logger.log("session_start", session_id=self.session_id)

        try:
            await self._loop()
        finally:
            # Always release the archive backend on exit
            self.controller.archive.close()

    async def _loop(self) -> None:
        """Read and dispatch input until the user exits."""
        while True:
            try:
                user_input = input(self._prompt()).strip()

                if not user_input:
                    continue

                if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                    if not await self._handle_command(user_input):
                        break
                    continue

                self._lines.append(user_input)

            except KeyboardInterrupt:
                print("\n\n⚡ Interrupted")
                try:
                    confirm = input("Exit? (y/n): ").strip().lower()
                    if confirm in ("y", "yes"):
                        print("👋 Goodbye!")
                        self.logger.log("session_interrupt", session_id=self.session_id)
                        break
                except (KeyboardInterrupt, EOFError):
                    print("\n👋 Goodbye!")
                    break

            except EOFError:
                print("\n👋 Goodbye!")
                break


async def run_cli() -> None:
    """Run the CLI with configuration from the environment."""
    config = config_from_env()
    configure_event_log(config.log_dir)

    if not config.api_key:
        print("❌ Error: GEMINI_API_KEY environment variable not set")
        print("Please set it in your .env file or environment")
        return

    assert config.data_dir is not None
    cli = CLI(build_controller(config), images_dir=config.data_dir / "images")
    await cli.run()
