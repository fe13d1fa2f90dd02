"""
Hashify - Flask Application
-----------------------------------------------------
Salted MD5 / SHA-256 / SHA-512 hashing, comparison, batch hashing,
per-browser history and hash fingerprints.
"""

from flask import Flask, request, redirect, render_template, session, url_for, flash, abort, send_file, jsonify
import sqlite3, os
from datetime import datetime, timezone
import uuid
import io

from hash_utils import (
    ALGORITHMS,
    SALT_POSITIONS,
    UnavailableCryptoPrimitive,
    compare_texts,
    compute_hash,
    generate_salt,
    hash_lines,
    hsl_css,
    is_hex_digest,
    visualize_hash,
    MIN_VISUALIZE_LENGTH,
)
import export_utils

app = Flask(__name__)
app.secret_key = os.environ.get("APP_SECRET_KEY", "change-me-in-production")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_FILE = os.environ.get("HASHIFY_DB_FILE", os.path.join(BASE_DIR, "hashify.db"))

# ---------------- Settings ----------------
DEFAULT_ALGORITHM = "sha256"
HISTORY_LIMIT = 50
HASH_ERROR = "Error generating hash."
UNAVAILABLE_MESSAGE = "The SHA hashing backend is unavailable on this server. MD5 still works."

ALGORITHM_LABELS = {
    "md5": "MD5",
    "sha256": "SHA-256",
    "sha512": "SHA-512",
}

# ---------------- Database Helpers ----------------
def get_db():
    """Open a connection to SQLite with Row access."""
    conn = sqlite3.connect(DB_FILE)
    conn.row_factory = sqlite3.Row
    return conn

def init_db():
    """Initialize the database by executing schema.sql."""
    schema_path = os.path.join(BASE_DIR, "schema.sql")
    with open(schema_path, "r", encoding="utf-8") as f:
        schema_sql = f.read()
    conn = get_db()
    try:
        conn.executescript(schema_sql)
        conn.commit()
    finally:
        conn.close()

# Ensure database is initialized at import time
db_dir = os.path.dirname(DB_FILE)
if db_dir:
    os.makedirs(db_dir, exist_ok=True)
init_db()

# ---------------- History ----------------
def add_history(client_id, input_text, algorithm, hash_value):
    """Record a digest for this browser, keeping only the newest HISTORY_LIMIT rows."""
    conn = get_db()
    try:
        conn.execute(
            """INSERT INTO hash_history
            (item_id, client_id, created_at, input, algorithm, hash)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (uuid.uuid4().hex, client_id, datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
             input_text, algorithm, hash_value)
        )
        conn.execute(
            """DELETE FROM hash_history
            WHERE client_id = ? AND seq NOT IN (
                SELECT seq FROM hash_history WHERE client_id = ? ORDER BY seq DESC LIMIT ?
            )""",
            (client_id, client_id, HISTORY_LIMIT)
        )
        conn.commit()
    finally:
        conn.close()

def load_history(client_id):
    """Return this browser's history, newest first."""
    conn = get_db()
    try:
        rows = conn.execute(
            """SELECT item_id, created_at, input, algorithm, hash
            FROM hash_history WHERE client_id = ? ORDER BY seq DESC""",
            (client_id,)
        ).fetchall()
    finally:
        conn.close()
    return [
        {
            "id": row["item_id"],
            "timestamp": row["created_at"],
            "input": row["input"],
            "algorithm": row["algorithm"],
            "hash": row["hash"],
        }
        for row in rows
    ]

def clear_history(client_id):
    conn = get_db()
    try:
        conn.execute("DELETE FROM hash_history WHERE client_id = ?", (client_id,))
        conn.commit()
    finally:
        conn.close()

# ---------------- Utility ----------------
def current_client_id():
    """Opaque per-browser id stored in the session; history is keyed by it."""
    client_id = session.get("client_id")
    if not client_id:
        client_id = uuid.uuid4().hex
        session["client_id"] = client_id
    return client_id

def read_algorithm(source):
    algorithm = source.get("algorithm", DEFAULT_ALGORITHM)
    if algorithm not in ALGORITHMS:
        app.logger.warning(f"Rejected algorithm: {algorithm!r}")
        abort(400, f"Unsupported algorithm: {algorithm}")
    return algorithm

def read_generator_form():
    """Parse the generator form into the fields compute_hash needs."""
    salt_position = request.form.get("salt_position", "prefix")
    if salt_position not in SALT_POSITIONS:
        app.logger.warning(f"Rejected salt position: {salt_position!r}")
        abort(400, f"Unsupported salt position: {salt_position}")
    return {
        "text": request.form.get("text", ""),
        "algorithm": read_algorithm(request.form),
        "use_salt": request.form.get("use_salt") == "on",
        "salt": request.form.get("salt", ""),
        "salt_position": salt_position,
    }

def fingerprint(hash_value):
    """CSS colours for the fingerprint grid of a digest."""
    return [hsl_css(color) for color in visualize_hash(hash_value)]

def send_export(content, filename, fmt):
    data = content if isinstance(content, bytes) else content.encode("utf-8")
    file_obj = io.BytesIO(data)
    return send_file(
        file_obj,
        as_attachment=True,
        download_name=filename,
        mimetype=export_utils.MIME_TYPES[fmt]
    )

def render_page(template, **context):
    return render_template(
        template,
        algorithms=ALGORITHMS,
        algorithm_labels=ALGORITHM_LABELS,
        **context
    )

# ---------------- Routes ----------------
@app.route("/", methods=["GET", "POST"])
def index():
    """Hash generator: text, algorithm and optional salt/pepper."""
    form = {
        "text": "",
        "algorithm": DEFAULT_ALGORITHM,
        "use_salt": False,
        "salt": "",
        "salt_position": "prefix",
    }
    hashed_output = ""

    if request.method == "POST":
        form = read_generator_form()
        # Nothing typed means no hash, even if a salt is set
        if form["text"]:
            salt = form["salt"] if form["use_salt"] else ""
            try:
                hashed_output = compute_hash(form["text"], form["algorithm"], salt, form["salt_position"])
            except UnavailableCryptoPrimitive as e:
                app.logger.error(f"Hashing failed: {e}")
                flash(f"Hashing Error: {UNAVAILABLE_MESSAGE}", "error")
                hashed_output = HASH_ERROR
            else:
                try:
                    add_history(current_client_id(), form["text"], form["algorithm"], hashed_output)
                except sqlite3.Error as e:
                    app.logger.error(f"Could not save history: {e}")

    has_hash = bool(hashed_output) and hashed_output != HASH_ERROR
    return render_page(
        "index.html",
        title="Hashify",
        form=form,
        hashed_output=hashed_output,
        has_hash=has_hash,
        pixels=fingerprint(hashed_output) if has_hash else [],
    )

@app.route("/api/hash", methods=["POST"])
def api_hash():
    """JSON hashing endpoint: {text, algorithm, salt?, salt_position?} -> {hash}."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "Expected a JSON object"}), 400
    try:
        hash_value = compute_hash(
            data.get("text", ""),
            data.get("algorithm", DEFAULT_ALGORITHM),
            data.get("salt", ""),
            data.get("salt_position", "prefix"),
        )
    except UnavailableCryptoPrimitive as e:
        app.logger.error(f"Hashing failed: {e}")
        return jsonify({"error": UNAVAILABLE_MESSAGE}), 503
    except (ValueError, TypeError, AttributeError) as e:
        app.logger.warning(f"Rejected hash request: {e}")
        return jsonify({"error": str(e)}), 400
    return jsonify({"hash": hash_value})

@app.route("/api/salt")
def api_salt():
    """Random 16-byte salt as hex."""
    return jsonify({"salt": generate_salt()})

@app.route("/export/<fmt>", methods=["POST"])
def export_hash(fmt):
    """Download the generator result as TXT, JSON or a QR code PNG."""
    if fmt not in ("txt", "json", "qr"):
        abort(404)

    form = read_generator_form()
    salt = form["salt"] if form["use_salt"] else ""
    hashed_output = ""
    if form["text"]:
        try:
            hashed_output = compute_hash(form["text"], form["algorithm"], salt, form["salt_position"])
        except UnavailableCryptoPrimitive as e:
            app.logger.error(f"Hashing failed during export: {e}")
            flash(f"Hashing Error: {UNAVAILABLE_MESSAGE}", "error")
            return redirect(url_for("index"))

    if not hashed_output:
        flash("Nothing to export yet. Enter some text first.", "error")
        return redirect(url_for("index"))

    if fmt == "qr":
        png = export_utils.hash_to_qr_png(hashed_output)
        return send_export(png, export_utils.single_filename(form["algorithm"], "png"), "png")
    if fmt == "txt":
        content = export_utils.hash_to_text(hashed_output)
    else:
        content = export_utils.hash_to_json(
            form["text"],
            form["algorithm"],
            hashed_output,
            salt=form["salt"] if form["use_salt"] else None,
            salt_position=form["salt_position"] if form["use_salt"] else None,
        )
    return send_export(content, export_utils.single_filename(form["algorithm"], fmt), fmt)

@app.route("/compare", methods=["GET", "POST"])
def compare():
    """Hash two inputs with the same algorithm and report whether they match."""
    text1 = request.form.get("text1", "")
    text2 = request.form.get("text2", "")
    algorithm = DEFAULT_ALGORITHM
    hash1 = hash2 = ""
    match = None

    if request.method == "POST":
        algorithm = read_algorithm(request.form)
        try:
            hash1, hash2, match = compare_texts(text1, text2, algorithm)
        except UnavailableCryptoPrimitive as e:
            app.logger.error(f"Comparison failed: {e}")
            flash(f"Hashing Error: {UNAVAILABLE_MESSAGE}", "error")
            hash1 = hash2 = HASH_ERROR

    return render_page(
        "compare.html",
        title="Compare Hashes",
        text1=text1,
        text2=text2,
        algorithm=algorithm,
        hash1=hash1,
        hash2=hash2,
        match=match,
    )

def read_batch_content():
    """Batch input comes from an uploaded file, falling back to pasted lines."""
    file = request.files.get("file")
    if file and file.filename:
        # utf-8-sig drops a leading BOM; undecodable bytes become U+FFFD
        return file.read().decode("utf-8-sig", errors="replace")
    return request.form.get("lines", "")

@app.route("/batch", methods=["GET", "POST"])
def batch():
    """Hash every non-blank line of an uploaded file or pasted text."""
    algorithm = DEFAULT_ALGORITHM
    content = ""
    results = []

    if request.method == "POST":
        algorithm = read_algorithm(request.form)
        content = read_batch_content()
        try:
            results = hash_lines(content, algorithm)
        except UnavailableCryptoPrimitive as e:
            app.logger.error(f"Batch hashing failed: {e}")
            flash(f"Hashing Error: {UNAVAILABLE_MESSAGE}", "error")
        else:
            if results:
                flash(f"Processed {len(results)} lines.", "success")
            else:
                flash("No lines to hash.", "error")

    return render_page(
        "batch.html",
        title="Batch Hashing",
        algorithm=algorithm,
        content=content,
        results=results,
    )

@app.route("/batch/export/<fmt>", methods=["POST"])
def batch_export(fmt):
    """Download batch results as CSV or JSON."""
    if fmt not in ("csv", "json"):
        abort(404)

    algorithm = read_algorithm(request.form)
    try:
        results = hash_lines(read_batch_content(), algorithm)
    except UnavailableCryptoPrimitive as e:
        app.logger.error(f"Batch export failed: {e}")
        flash(f"Hashing Error: {UNAVAILABLE_MESSAGE}", "error")
        return redirect(url_for("batch"))

    if not results:
        flash("No results to download.", "error")
        return redirect(url_for("batch"))

    if fmt == "csv":
        content = export_utils.batch_to_csv(results)
    else:
        content = export_utils.batch_to_json(results)
    return send_export(content, export_utils.batch_filename(algorithm, fmt), fmt)

@app.route("/history")
def history():
    """This browser's most recent digests."""
    try:
        items = load_history(current_client_id())
    except sqlite3.Error as e:
        app.logger.error(f"Could not load history: {e}")
        flash("Could not load history.", "error")
        items = []
    return render_page("history.html", title="Hashing History", items=items, limit=HISTORY_LIMIT)

@app.route("/history/clear", methods=["POST"])
def history_clear():
    try:
        clear_history(current_client_id())
        flash("History cleared!", "success")
    except sqlite3.Error as e:
        app.logger.error(f"Could not clear history: {e}")
        flash("Failed to clear history.", "error")
    return redirect(url_for("history"))

@app.route("/history/export")
def history_export():
    """Download this browser's history as JSON."""
    try:
        items = load_history(current_client_id())
    except sqlite3.Error as e:
        app.logger.error(f"Could not export history: {e}")
        flash("Could not load history.", "error")
        return redirect(url_for("history"))
    if not items:
        flash("No history to export.", "error")
        return redirect(url_for("history"))
    return send_export(export_utils.history_to_json(items), export_utils.history_filename(), "json")

@app.route("/visualize", methods=["GET", "POST"])
def visualize():
    """Render a hash as an 8x8 colour fingerprint."""
    source = request.form if request.method == "POST" else request.args
    hash_value = source.get("hash", "").strip()
    pixels = []

    if len(hash_value) >= MIN_VISUALIZE_LENGTH:
        if is_hex_digest(hash_value):
            pixels = fingerprint(hash_value)
        else:
            app.logger.warning("Rejected non-hex input for visualization")
            flash("Only hexadecimal characters (0-9, a-f) can be visualized.", "error")

    return render_page(
        "visualize.html",
        title="Hash Visualizer",
        hash_value=hash_value,
        pixels=pixels,
        min_length=MIN_VISUALIZE_LENGTH,
    )

# Entrypoint for local dev
if __name__ == "__main__":
    if not os.path.exists(DB_FILE):
        print("[*] Initializing database...")
        init_db()
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
