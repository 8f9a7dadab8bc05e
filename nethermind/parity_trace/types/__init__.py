from typing import Literal

BlockTag = Literal["latest", "pending", "earliest"]

BlockIdentifier = int | BlockTag
"""Block number, or one of the string tags 'latest', 'pending' or 'earliest'"""

BlockReference = BlockIdentifier | str
"""Block identifier, or a 0x-prefixed 32 byte block hash"""
