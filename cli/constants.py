"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "status", "retry", "retry-failed", "merge", "config", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2EA043 bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;46;160;67m"
RED = "\033[38;2;248;81;73m"
YELLOW = "\033[38;2;210;153;34m"
RESET = "\033[0m"

LOGO = f"""{GREEN}
 ███████╗██████╗ ███████╗███████╗
 ██╔════╝██╔══██╗██╔════╝██╔════╝
 ███████╗██████╔╝█████╗  █████╗
 ╚════██║██╔═══╝ ██╔══╝  ██╔══╝
 ███████║██║     ██║     ███████╗
 ╚══════╝╚═╝     ╚═╝     ╚══════╝
{RESET}"""

WELCOME_TITLE = "SPFE CLI - Parallel chunked file hashing"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "spfe> "

HELP_TEXT = """Available commands:
  upload <path> [file-id]     Split file into chunks and upload them in parallel
  status                      Show per-chunk state of the last upload
  retry <index>               Retry one failed chunk
  retry-failed                Retry every failed chunk
  merge [file-id]             Fetch merged manifest (defaults to last uploaded file)
  config [key value]          Show configuration, or set one key
  clear                       Clear screen and redisplay welcome message
  help                        Show this help
  exit                        Exit REPL

The file id defaults to the file name. Chunk size and concurrency come
from the configuration (keys chunk_size and concurrency).
Examples:
  upload data/report.pdf
  upload data/report.pdf report-v2
  retry 3
  merge report-v2
  config concurrency 8"""
