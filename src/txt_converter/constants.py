"""File names shared by the scanner, the conversion task and the reports."""

OUTPUT_DIR_NAME = "_ConvertedToTxt"
REPORT_STRUCTURE_FILE = "_FileStructure.md"
MERGED_FILE_SUFFIX = "_Full_Source_code.txt"

# unprocessed files per directory listed before they collapse into a summary
COLLAPSE_THRESHOLD = 5

# always picked up by the scanner, never compressed
DOC_EXTENSION = ".md"
