"""Named boolean display toggles that models register with their world."""


class Option:
    """A user-visible on/off switch, e.g. "Show Bumper Data".

    `optstr` is the key used in worldfiles and on the command line.
    """

    def __init__(self, name, optstr, shortcut="", value=True):
        self.name = name
        self.optstr = optstr
        self.shortcut = shortcut
        self.value = bool(value)

    def __bool__(self):
        return self.value

    def set(self, value):
        self.value = bool(value)

    def __repr__(self):
        return f"Option({self.optstr!r}={self.value})"
