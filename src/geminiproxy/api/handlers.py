"""Route handlers for the Gemini proxy endpoints."""
import json
import time

from flask import Response, g, jsonify, request, send_from_directory, stream_with_context
from pydantic import ValidationError

from ..core.errors import ClientInputError
from ..services.gemini_service import (
    build_generation_config,
    generate_content,
    send_chat_message,
    stream_chat_message,
)
from ..utils.content import ContentNormalizer, InlineImagePart, TextPart, file_to_inline_part, guess_mime_type
from ..utils.history import split_conversation
from ..utils.http import error_response, error_response_for, failure_response, failure_response_for
from ..utils.logging import log_event
from .formatters import build_chat_completion, make_response_id
from .schemas import ChatCompletionsRequest, InlineImage
from .streaming import open_fragment_stream, stream_chat_sse

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def _build_config(settings, payload: ChatCompletionsRequest):
    max_tokens = payload.max_tokens
    if max_tokens is None:
        max_tokens = payload.max_completion_tokens
    return build_generation_config(
        temperature=payload.temperature if payload.temperature is not None else settings.temperature,
        top_p=payload.top_p if payload.top_p is not None else settings.top_p,
        top_k=settings.top_k,
        max_output_tokens=max_tokens if max_tokens is not None else settings.max_output_tokens,
    )


def _default_config(settings):
    return build_generation_config(
        temperature=settings.temperature,
        top_p=settings.top_p,
        top_k=settings.top_k,
        max_output_tokens=settings.max_output_tokens,
    )


def _parse_inline_images(raw):
    """Accept a list of {data, mimeType} dicts or a JSON string holding one."""
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise ClientInputError("images must be a JSON array of {data, mimeType}")
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise ClientInputError("images must be a JSON array of {data, mimeType}")
    parts = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            image = InlineImage.model_validate(item)
        except ValidationError as e:
            raise ClientInputError(str(e))
        if image.data and image.mime_type:
            parts.append(InlineImagePart(data=image.data, mime_type=image.mime_type))
    return parts


def register_routes(app, settings, executor, store):
    """Register Flask routes on the app."""
    normalizer = ContentNormalizer(store, settings.unsupported_content_text)

    def _uploaded_files(field):
        files = [storage for storage in request.files.getlist(field) if storage and storage.filename]
        if len(files) > settings.max_upload_files:
            raise ClientInputError(f"Too many files in '{field}' (max {settings.max_upload_files})")
        return files

    @app.route('/', methods=['GET'])
    def index():
        return send_from_directory(settings.static_dir, "index.html")

    @app.route('/v1/chat/completions', methods=['POST'])
    def chat_completions():
        try:
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return error_response("Request body must be a JSON object", 400)
            try:
                payload = ChatCompletionsRequest.model_validate(data)
            except ValidationError as e:
                return error_response(str(e), 400)
            if not payload.messages:
                return error_response("No messages provided", 400)

            messages = [msg.model_dump() for msg in payload.messages]
            history, current_parts = split_conversation(messages, normalizer)
            config = _build_config(settings, payload)
            model = settings.model

            if payload.stream:
                response_id = make_response_id("chatcmpl")
                created = int(time.time())

                def open_stream():
                    return executor.execute(
                        lambda client: open_fragment_stream(
                            stream_chat_message(client, model, history, current_parts, config)
                        )
                    )

                return Response(
                    stream_with_context(stream_chat_sse(open_stream, model, response_id, created, g.request_id)),
                    mimetype="text/event-stream",
                    headers=SSE_HEADERS,
                )

            content = executor.execute(
                lambda client: send_chat_message(client, model, history, current_parts, config)
            )
            return jsonify(build_chat_completion(content, model))

        except ClientInputError as e:
            return error_response_for(e)
        except Exception as e:
            log_event(40, "chat_completions_error", error=str(e))
            return error_response_for(e)

    @app.route('/upload-files', methods=['POST'])
    def upload_files():
        try:
            uploaded = [store.save(storage) for storage in _uploaded_files("files")]
            return jsonify({"success": True, "files": uploaded})
        except ClientInputError as e:
            return failure_response_for(e)
        except Exception as e:
            log_event(40, "upload_error", error=str(e))
            return failure_response_for(e)

    @app.route('/backends/chat-completions/generate', methods=['POST'])
    def generate():
        try:
            if request.is_json:
                body = request.get_json(silent=True) or {}
                if not isinstance(body, dict):
                    body = {}
                prompt = body.get("prompt")
                inline_images = body.get("images")
            else:
                prompt = request.form.get("prompt")
                inline_images = request.form.get("images")

            if not prompt:
                return failure_response("prompt is required", 400)

            parts = [TextPart(str(prompt))]
            for storage in _uploaded_files("images"):
                info = store.save(storage)
                mime_type = guess_mime_type(info["path"], storage.mimetype)
                parts.append(file_to_inline_part(info["path"], mime_type))
            parts.extend(_parse_inline_images(inline_images))

            config = _default_config(settings)
            text = executor.execute(lambda client: generate_content(client, settings.model, parts, config))
            return jsonify({"success": True, "response": text})
        except ClientInputError as e:
            return failure_response_for(e)
        except Exception as e:
            log_event(40, "generate_error", error=str(e))
            return failure_response_for(e)

    @app.route('/uploads/<path:filename>', methods=['GET'])
    def uploaded_file(filename):
        return send_from_directory(store.base_dir, filename)

    @app.route('/health', methods=['GET'])
    def health():
        rotator = executor.rotator
        payload = {
            "status": "ok",
            "apiKeys": {"total": len(rotator), "current": rotator.index},
        }
        if request.args.get("verbose") == "1":
            payload["uptime_seconds"] = int(time.time() - app.config.get("APP_STARTED_AT", time.time()))
            payload["version"] = settings.app_version
        return jsonify(payload)

    @app.errorhandler(404)
    def handle_not_found(error):
        return error_response("Not found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return error_response("Method not allowed", 405)

    @app.errorhandler(413)
    def handle_payload_too_large(error):
        return error_response("Request body too large", 413)
