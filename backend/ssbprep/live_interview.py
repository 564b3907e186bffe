"""
Live voice interview relay.

The browser streams 16 kHz PCM microphone audio over a websocket; we forward it
to a Gemini Live session and relay the model's 24 kHz audio plus the input and
output transcriptions back. The transcript collected here is what gets
assessed once the candidate finishes the interview.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket
from google import genai
from google.genai import types

from .audio import INPUT_SAMPLE_RATE, decode, encode, sample_rate_from_mime
from .settings import settings

logger = logging.getLogger(__name__)

USER = "User"
AI = "AI"


class Transcript:
	def __init__(self) -> None:
		self.entries: List[Dict[str, str]] = []

	def add(self, sender: str, text: str) -> None:
		if not text:
			return
		last = self.entries[-1] if self.entries else None
		if last is not None and last["sender"] == sender:
			last["text"] += text
		else:
			self.entries.append({"sender": sender, "text": text})

	def __len__(self) -> int:
		return len(self.entries)

	def to_list(self) -> List[Dict[str, str]]:
		return [dict(e) for e in self.entries]


def build_system_instruction(piq_data: Dict[str, Any]) -> str:
	return (
		"You are an SSB Interviewing Officer conducting a personal interview. "
		"Use the candidate's PIQ data to ask relevant questions. "
		"Keep your questions concise and your tone professional. Start with a welcoming question. "
		f"PIQ Data: {json.dumps(piq_data or {})}"
	)


def build_live_config(piq_data: Dict[str, Any]) -> Dict[str, Any]:
	return {
		# Live API accepts a single output modality
		"response_modalities": ["AUDIO"],
		"input_audio_transcription": {},
		"output_audio_transcription": {},
		"system_instruction": build_system_instruction(piq_data),
	}


def open_live_session(piq_data: Dict[str, Any]):
	"""Async context manager yielding a connected Gemini Live session."""
	if not settings.gemini_api_key:
		raise ValueError("GEMINI_API_KEY is not configured")
	client = genai.Client(api_key=settings.gemini_api_key)
	return client.aio.live.connect(model=settings.gemini_live_model, config=build_live_config(piq_data))


class InterviewRelay:
	def __init__(self, websocket: WebSocket, session: Any, transcript: Optional[Transcript] = None) -> None:
		self.websocket = websocket
		self.session = session
		self.transcript = transcript or Transcript()

	async def send_status(self, status: str) -> None:
		await self.websocket.send_json({"type": "status", "status": status})

	async def _send_transcript(self, sender: str) -> None:
		last = self.transcript.entries[-1]
		await self.websocket.send_json({"type": "transcript", "sender": sender, "text": last["text"], "index": len(self.transcript) - 1})

	async def handle_server_message(self, message: Any) -> None:
		content = getattr(message, "server_content", None)
		if content is None:
			return
		input_tx = getattr(content, "input_transcription", None)
		if input_tx is not None and getattr(input_tx, "text", None):
			self.transcript.add(USER, input_tx.text)
			await self._send_transcript(USER)
		output_tx = getattr(content, "output_transcription", None)
		if output_tx is not None and getattr(output_tx, "text", None):
			self.transcript.add(AI, output_tx.text)
			await self._send_transcript(AI)
		model_turn = getattr(content, "model_turn", None)
		parts = getattr(model_turn, "parts", None) or []
		for part in parts:
			inline = getattr(part, "inline_data", None)
			if inline is None or not getattr(inline, "data", None):
				continue
			await self.send_status("AI Speaking...")
			await self.websocket.send_json({
				"type": "audio",
				"data": encode(inline.data),
				"sample_rate": sample_rate_from_mime(getattr(inline, "mime_type", None)),
			})
		if getattr(content, "turn_complete", False):
			await self.send_status("Your turn")

	async def pump_from_model(self) -> None:
		# receive() yields one model turn, then stops
		while True:
			got_any = False
			async for message in self.session.receive():
				got_any = True
				await self.handle_server_message(message)
			if not got_any:
				return

	async def pump_from_browser(self) -> None:
		while True:
			message = await self.websocket.receive_json()
			kind = message.get("type")
			if kind == "audio":
				data = decode(message.get("data", ""))
				if data:
					await self.session.send_realtime_input(
						audio=types.Blob(data=data, mime_type=f"audio/pcm;rate={INPUT_SAMPLE_RATE}")
					)
			elif kind == "finish":
				return
			else:
				logger.debug("Ignoring interview message type %r", kind)

	async def run(self) -> None:
		await self.send_status("Connected. Press Mic to start.")
		model_task = asyncio.create_task(self.pump_from_model())
		browser_task = asyncio.create_task(self.pump_from_browser())
		try:
			done, _ = await asyncio.wait({model_task, browser_task}, return_when=asyncio.FIRST_COMPLETED)
			for task in done:
				# Surface disconnects and API errors to the caller
				task.result()
			if model_task in done and not browser_task.done():
				# Model closed the session; let the candidate finish on their side
				await self.send_status("Session ended.")
				await browser_task
		finally:
			for task in (model_task, browser_task):
				if not task.done():
					task.cancel()
			await asyncio.gather(model_task, browser_task, return_exceptions=True)
