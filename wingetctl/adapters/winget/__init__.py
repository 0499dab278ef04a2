from wingetctl.adapters.winget.cli import WingetCli

__all__ = ["WingetCli"]
