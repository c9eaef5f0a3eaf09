from .convert import ConvertQFRSubCommand as ConvertQFRSubCommand
from .info import InfoQFRSubCommand as InfoQFRSubCommand
