from solcover.support.support_utils import Singleton


class Args(object, metaclass=Singleton):
    """
    This module helps in preventing args being sent through multiple of classes to reach
    the disassembler and coverage modules
    """

    def __init__(self):
        self.include_creation_code = True
        self.verify_opcodes = True
        self.skip_interfaces = True
        self.strict_source_ranges = True

    def reset(self) -> None:
        """Restores the default settings."""
        self.__init__()


args = Args()
