"""FastAPI web application for DepGuard."""

from typing import Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from core.advisory import AdvisoryGenerator, static_advice
from core.config import Settings
from core.errors import ManifestError
from core.models import ConflictKind, ConflictRecord
from core.parse_node import find_version_conflicts, parse_package_json
from core.providers import create_llm_client

app = FastAPI(
    title="DepGuard",
    description="Detect dependency conflicts in package manifests",
    version="0.1.0",
)


class CheckRequest(BaseModel):
    """Request model for checking a package.json."""
    content: str
    filename: str = "package.json"


class CheckResponse(BaseModel):
    """Response model for a manifest check."""
    has_conflict: bool
    conflict: Optional[dict] = None
    package_count: int


class AdviseRequest(BaseModel):
    """Request model for conflict advice."""
    kind: str
    problems: list[str]
    source_file: str = "package.json"
    manager: str = "npm"
    use_ai: bool = True


class AdviseResponse(BaseModel):
    """Response model for conflict advice."""
    analysis: Optional[dict] = None
    advice: list[str]


@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve the main application page."""
    return get_index_html()


@app.post("/api/check", response_model=CheckResponse)
async def check_manifest(request: CheckRequest):
    """Report packages declared with different versions across sections."""
    try:
        content = request.content.strip()
        if not content:
            raise HTTPException(status_code=400, detail="No content provided")

        manifest = parse_package_json(content)
        problems = find_version_conflicts(manifest)

        conflict = None
        if problems:
            conflict = ConflictRecord(
                kind=ConflictKind.VERSION_CONFLICT,
                problems=tuple(problems),
                source_file=request.filename,
            ).to_dict()

        return CheckResponse(
            has_conflict=conflict is not None,
            conflict=conflict,
            package_count=len({entry.name for entry in manifest.entries}),
        )

    except ManifestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        # Re-raise HTTP exceptions (don't convert to 500)
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error checking manifest: {str(e)}")


@app.post("/api/upload", response_model=CheckResponse)
async def upload_file(file: UploadFile = File(...)):
    """Upload and check a package.json file."""
    try:
        if not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")

        content = await file.read()
        request = CheckRequest(content=content.decode("utf-8"), filename=file.filename)
        return await check_manifest(request)

    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be valid UTF-8 text")
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")


@app.post("/api/advise", response_model=AdviseResponse)
async def advise(request: AdviseRequest):
    """Explain a conflict with the configured LLM, or fall back to static advice."""
    try:
        kind = ConflictKind(request.kind)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown conflict kind: {request.kind}")

    if not request.problems:
        raise HTTPException(status_code=400, detail="No problems provided")

    record = ConflictRecord(kind=kind, problems=tuple(request.problems), source_file=request.source_file)

    client = create_llm_client(Settings()) if request.use_ai else None
    analysis = await AdvisoryGenerator(client).advise(record)

    if analysis:
        return AdviseResponse(analysis=analysis.to_dict(), advice=[])
    return AdviseResponse(advice=static_advice(kind, request.manager))


def get_index_html() -> str:
    """Return the main HTML page."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>DepGuard - Dependency Conflict Checker</title>
        <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
    </head>
    <body>
        <div class="container py-4">
            <div class="text-center mb-4">
                <h1 class="display-5 fw-bold text-primary">DepGuard</h1>
                <p class="lead text-muted">Find packages declared with conflicting versions in your package.json</p>
            </div>

            <div class="row">
                <div class="col-lg-6 mb-4">
                    <div class="card h-100">
                        <div class="card-header"><h5 class="mb-0">package.json</h5></div>
                        <div class="card-body">
                            <textarea id="manifestInput" class="form-control font-monospace" rows="16"
                                placeholder='{"dependencies": {"left-pad": "^1.0.0"}, "devDependencies": {"left-pad": "^2.0.0"}}'></textarea>
                            <button id="checkBtn" class="btn btn-primary mt-3">Check</button>
                        </div>
                    </div>
                </div>
                <div class="col-lg-6 mb-4">
                    <div class="card h-100">
                        <div class="card-header"><h5 class="mb-0">Results</h5></div>
                        <div class="card-body" id="results">
                            <p class="text-muted">Paste a package.json and press Check.</p>
                        </div>
                    </div>
                </div>
            </div>
        </div>

        <script>
            const results = document.getElementById('results');

            function escapeHtml(text) {
                const div = document.createElement('div');
                div.textContent = text;
                return div.innerHTML;
            }

            async function postJson(url, payload) {
                const response = await fetch(url, {
                    method: 'POST',
                    headers: {'Content-Type': 'application/json'},
                    body: JSON.stringify(payload)
                });
                const data = await response.json();
                if (!response.ok) {
                    throw new Error(data.detail || 'Request failed');
                }
                return data;
            }

            document.getElementById('checkBtn').addEventListener('click', async () => {
                try {
                    const data = await postJson('/api/check', {
                        content: document.getElementById('manifestInput').value
                    });
                    if (!data.has_conflict) {
                        results.innerHTML = `<div class="alert alert-success">No conflicts in ${data.package_count} packages.</div>`;
                        return;
                    }
                    const items = data.conflict.problems.map(p => `<li>${escapeHtml(p)}</li>`).join('');
                    results.innerHTML = `<div class="alert alert-warning"><strong>${data.conflict.title}</strong><ul class="mb-0">${items}</ul></div>`;

                    const advice = await postJson('/api/advise', {
                        kind: data.conflict.kind,
                        problems: data.conflict.problems
                    });
                    const lines = advice.analysis
                        ? [advice.analysis.explanation, ...advice.analysis.steps]
                        : advice.advice;
                    results.innerHTML += `<div class="alert alert-info">${lines.map(escapeHtml).join('<br>')}</div>`;
                } catch (error) {
                    results.innerHTML = `<div class="alert alert-danger"><strong>Error:</strong> ${escapeHtml(error.message)}</div>`;
                }
            });
        </script>
    </body>
    </html>
    """


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
