# Format strings
DEFAULT_DISPLAY_FORMAT = "[prev] [play-pause] [next] [info] ┃ [metadata]"
DEFAULT_METADATA_FORMAT = "<[artist] - >[title]"

# Tick loop
DEFAULT_TICK_INTERVAL = 0.3   # seconds
DEFAULT_REFRESH_TICKS = 10    # refresh the player list every N ticks

# Shown instead of the format when no player is running
DEFAULT_EMPTY_MSG = " no music playing"

# Icons (Font Awesome / Nerd Font glyphs)
DEFAULT_ICONS = {
    'play': "",         # [play-pause] while not playing
    'pause': "",        # [play-pause] while playing
    'playing': "",      # [status]
    'paused': "",
    'stopped': "",
    'prev': "",
    'next': "",
    'prev-player': "",
    'next-player': "",
}

# Output backends
RENDERERS = ('polybar', 'plain', 'waybar')
DEFAULT_RENDERER = 'polybar'

# Appended after scroll windows: polybar strips trailing whitespace from
# module output, which would eat the padding of a window at the line end
POLYBAR_PADDING_GUARD = "\uffff"

# Command channel
DEFAULT_COMMAND_ADDRESS = "tcp://127.0.0.1:5557"
COMMAND_SEND_TIMEOUT = 1000   # ms

# playerctl
PLAYERCTL_BINARY = "playerctl"
PLAYERCTL_TIMEOUT = 2.0       # seconds

# Logging
LOG_MAX_BYTES = 10_000_000    # 10MB
LOG_BACKUP_COUNT = 5
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
