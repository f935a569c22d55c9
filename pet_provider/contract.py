"""
Constants shared by the provider, the stores and the clients.

Describes the content authority, the URI paths, the pets table layout and
the MIME-like type tokens returned by PetProvider.get_type().
"""

CONTENT_AUTHORITY = "com.example.android.pets"
CONTENT_SCHEME = "content"
BASE_CONTENT_URI = f"{CONTENT_SCHEME}://{CONTENT_AUTHORITY}"

PATH_PETS = "pets"
CONTENT_URI = f"{BASE_CONTENT_URI}/{PATH_PETS}"

# Type tokens for a list of pets and for a single pet
CONTENT_LIST_TYPE = f"vnd.android.cursor.dir/{CONTENT_AUTHORITY}/{PATH_PETS}"
CONTENT_ITEM_TYPE = f"vnd.android.cursor.item/{CONTENT_AUTHORITY}/{PATH_PETS}"

# Table layout
TABLE_NAME = "pets"
COLUMN_ID = "id"
COLUMN_PET_NAME = "name"
COLUMN_PET_BREED = "breed"
COLUMN_PET_GENDER = "gender"
COLUMN_PET_WEIGHT = "weight"

ALL_COLUMNS = (
    COLUMN_ID,
    COLUMN_PET_NAME,
    COLUMN_PET_BREED,
    COLUMN_PET_GENDER,
    COLUMN_PET_WEIGHT,
)

# Columns a client may write; the id is assigned by the store
WRITABLE_COLUMNS = ALL_COLUMNS[1:]

# Bumping this drops and recreates the table on the next open
DATABASE_VERSION = 1
