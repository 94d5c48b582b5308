"""
Configuration for the on-save watcher.
"""

WATCHER_CONFIG = {
    "debounce_delay": 0.5,  # Seconds to wait after the last event for a path
    "poll_interval": 0.25,  # Main loop tick
    "roast_on_save": True,
}

MONITORING_CONFIG = {
    "ignore_patterns": [
        "**/node_modules/**",
        "**/.git/**",
        "**/.bugduck/**",
        "**/build/**",
        "**/dist/**",
        "**/.next/**",
        "**/coverage/**",
        "**/.idea/**",
        "**/.vscode/**",
    ],
    "recursive": True,
}
