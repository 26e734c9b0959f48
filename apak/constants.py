import struct


# Magic and version
MAGIC = b"APAK"                # 4 bytes, ASCII
FOOTER_MAGIC = 0x4B41504B      # u32, "KPAK" when read little endian
VERSION = 1

# Any change below is a format change and needs a VERSION bump.
BLOCK_SIZE = 1024 * 1024  # 1 MiB
XOR_KEY = 0xA7
DEFLATE_LEVEL = 6
DEFLATE_WBITS = -15  # raw deflate stream, no zlib header

# Fixed layouts (little endian):
# header: magic[4], version i32, chunk_count i32
# index record head: path_len i32 (path bytes follow)
# index record tail: original_size i32, block_count i32
# block record: offset i64, length i32, size i32
# footer: index_offset i64, footer_magic u32
HEADER_STRUCT = struct.Struct("<4sii")
PATH_LEN_STRUCT = struct.Struct("<i")
CHUNK_INFO_STRUCT = struct.Struct("<ii")
BLOCK_STRUCT = struct.Struct("<qii")
FOOTER_STRUCT = struct.Struct("<qI")

HEADER_SIZE = HEADER_STRUCT.size  # 12
FOOTER_SIZE = FOOTER_STRUCT.size  # 12

INT32_MAX = 0x7FFFFFFF
