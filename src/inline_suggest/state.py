class AppState:
    """Process-wide CLI flags shared between the Typer callback and commands."""

    def __init__(self):
        self.verbose_mode: bool = False


APP_STATE = AppState()
