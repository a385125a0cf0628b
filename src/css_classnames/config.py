# src/css_classnames/config.py

OUTPUT_SEPARATOR = ","
ENCODING = "utf-8"
# Stylesheets may start with a byte-order mark; it is not part of the CSS.
SOURCE_ENCODING = "utf-8-sig"

# Import targets that point outside the local filesystem stay as written.
REMOTE_IMPORT_PREFIXES = ("http://", "https://", "//")

# Candidate spellings tried for an @import target, in order.
# "{name}" is the last path component, "{path}" the full target.
IMPORT_CANDIDATES = [
    "{path}",
    "{path}.css",
    "{path}.scss",
    "{dir}/_{name}.scss",
    "{path}/index.css",
    "{path}/_index.scss",
]

NODE_MODULES_DIR = "node_modules"
PACKAGE_STYLE_FIELD = "style"

KEYFRAMES_AT_RULES = {
    "keyframes",
    "-webkit-keyframes",
    "-moz-keyframes",
    "-o-keyframes",
}

# Mirrors the default name pattern of CSS modules: [name]__[local]___[hash:base64:5]
SCOPED_NAME_TEMPLATE = "{stem}__{local}___{digest}"
SCOPED_HASH_LENGTH = 5
