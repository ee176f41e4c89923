"""Example: using the rstr search engine from code, without the terminal UI.

Run with: python rstr_examples/example_usage.py [PATH] [PATTERN]
"""
import sys

from rstr import SearchRequest, fmt_size, scan_into, ResultStore

def main():
    root = sys.argv[1] if len(sys.argv) > 1 else "."
    pattern = sys.argv[2] if len(sys.argv) > 2 else "TODO"
    store = ResultStore()
    progress = scan_into(SearchRequest.build(root, pattern), store)
    for match in store:
        print(f"{match.file_path}:{match.line_number}: {match.line_text.strip()}")
    print(f"{len(store)} matches in {progress.files_scanned} files ({fmt_size(progress.bytes_scanned)})")

if __name__ == '__main__':
    main()
