"""All magic values live here — no inline literals anywhere else."""

# Gemini generateContent endpoint
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_MODEL = "gemini-2.0-flash"
GEMINI_GENERATE_PATH = "/models/%s:generateContent"
GEMINI_KEY_PARAM = "key"
TRANSCRIPTION_PROMPT = "Transcribe the following audio:"
# Seconds. httpx's own 5 s default is shorter than a typical clip round trip.
TRANSCRIPTION_TIMEOUT = 120

# Microphone capture (16-bit PCM)
SAMPLE_RATE = 16000
CHANNELS = 1
FRAMES_PER_BUFFER = 1024
SAMPLE_WIDTH_BYTES = 2
RECORDING_MIME_TYPE = "audio/webm"

# Recording container (Opus in WebM, encoded with PyAV)
WEBM_FORMAT = "webm"
WEBM_SUFFIX = ".webm"
WEBM_AUDIO_CODEC = "libopus"
OPUS_SAMPLE_RATE = 48000
PCM_SAMPLE_FORMAT = "s16"
CHANNEL_LAYOUTS = {1: "mono", 2: "stereo"}

# File selection
AUDIO_MIME_PREFIX = "audio/"
FALLBACK_MIME_TYPE = "application/octet-stream"
ACCEPTED_FORMATS_HINT = "MP3, WAV, MPEG, OGG"

# Export
DEFAULT_EXPORT_STEM = "transcription"
STRIPPED_SOURCE_SUFFIX = ".mp3"
PDF_EXTENSION = ".pdf"
TEXT_EXTENSION = ".txt"
PDF_FONT = "Helvetica"
PDF_FONT_SIZE = 12
PDF_LINE_HEIGHT = 7
PDF_MODULE = "fpdf"

# User-facing error messages
MSG_ERR_DEVICE = (
    "Could not access microphone. "
    "Please ensure it is connected and permissions are granted."
)
MSG_ERR_FILE_TYPE = "Please select an audio file (e.g., MP3, WAV)."
MSG_ERR_NO_FILE = "Please select an audio file to upload."
MSG_ERR_FILE_READ = "Failed to read the audio file."
MSG_ERR_TRANSCRIPTION = "Failed to transcribe audio. Please try again."
MSG_ERR_NO_TRANSCRIPTION = "No transcription found or unexpected response structure."
MSG_ERR_PDF_FALLBACK = "PDF export unavailable. Downloading as plain text."

# Log messages
MSG_APP_STARTING = "Starting audioscribe…"
MSG_RECORDING_STARTED = "Recording started (%s Hz, %s ch)"
MSG_RECORDING_STOPPED = "Recording stopped: %d fragments, %d bytes"
MSG_RECORDING_DISCARDED = "Active recording discarded"
MSG_ALREADY_RECORDING = "Recording already in progress"
MSG_NOT_RECORDING = "Stop ignored — not recording"
MSG_FILE_SELECTED = "Selected %s (%s)"
MSG_TRANSCRIBING = "→ Transcribing %s (%d base64 chars)"
MSG_TRANSCRIBE_OK = "✓ Transcribed (%.1fs, %d chars)"
MSG_TRANSCRIBE_FAIL = "✗ Transcription failed (%.1fs): %s"
MSG_API_ERROR = "Gemini API error: %s"
MSG_EXPORTED = "Exported %s"
MSG_COMMAND_FAILED = "Command %r failed"

# CLI
CMD_RECORD = "record"
CMD_STOP = "stop"
CMD_SELECT = "select"
CMD_UPLOAD = "upload"
CMD_DOWNLOAD = "download"
CMD_RESET = "reset"
CMD_HELP = "help"
CMD_QUIT = "quit"
CLI_PROMPT = "audioscribe"
MSG_TRANSCRIBING_STATUS = "Transcribing audio..."
MSG_UPLOAD_BUSY = "A transcription is already in progress."
MSG_SELECTED_FILE = "Selected file: %s"
MSG_NO_SELECTED_FILE = "No file selected"
MSG_SAVED = "Saved %s"
MSG_UNKNOWN_COMMAND = "Unknown command: %s — type 'help'"
MSG_COMMAND_ERROR = "Something went wrong running '%s'. See the log for details."
MSG_SELECT_USAGE = "Usage: select <path> [mime-type]"
MSG_HELP = (
    "Record audio or upload an audio file (%s) to get your transcription.\n"
    "\n"
    "Commands:\n"
    "  record                    — start recording from the microphone\n"
    "  stop                      — stop recording and transcribe\n"
    "  select <path> [mime-type] — stage an audio file\n"
    "  upload                    — transcribe the staged file\n"
    "  download                  — save the transcription (PDF or text)\n"
    "  reset                     — clear everything\n"
    "  help                      — show this message\n"
    "  quit                      — exit\n"
) % ACCEPTED_FORMATS_HINT
