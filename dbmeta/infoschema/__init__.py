"""Query building and reading of metadata from the information_schema views."""