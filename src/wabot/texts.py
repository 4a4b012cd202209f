"""User-visible reply texts."""

from __future__ import annotations

GENERIC_FAILURE = "❌ Terjadi kesalahan saat memproses perintah."
MEDIA_FETCH_FAILURE = "❌ Gagal mengunduh media."
GROUP_ONLY = "❌ Perintah ini hanya bisa digunakan di dalam grup."
OWNER_ONLY = "❌ Perintah ini khusus owner bot."

AI_EXAMPLE = "❌ Contoh: *.ai apa itu black hole?*"
AI_THINKING = "⏳ Sedang berpikir..."
AI_FAILURE = "❌ Terjadi kesalahan saat memproses AI"

TTDL_MISSING_URL = "❌ Mana link TikTok?"
TTDL_PROCESSING = "⏳ Memproses link..."
TTDL_NO_DATA = "❌ Gagal mendapatkan data video TikTok."
TTDL_NO_VIDEO = "❌ Video tidak tersedia."
TTDL_FAILURE = "❌ Gagal memproses link TikTok."
TTDL_CAPTION = "🎬 Video TikTok"

STICKER_NEED_MEDIA = "❌ Kirim gambar/video dulu lalu ketik *.sticker*"
STICKER_FAILURE = "❌ Gagal membuat stiker."
STICKER_SEND_FAILURE = "❌ Gagal mengirim stiker."
STICKER_FETCH_FAILURE = "❌ Terjadi kesalahan saat membuat stiker."

STATUS_NEED_REPLY = "❌ Balas status orang dengan perintah .s"
STATUS_NO_MEDIA = "❌ Tidak ada media status yang bisa diunduh!"
STATUS_SENT = "✅ Status berhasil dikirim ke owner."
STATUS_FAILURE = "❌ Gagal mengunduh status. Pastikan belum kedaluwarsa atau media masih tersedia."
STATUS_IMAGE_CAPTION = "📸 Status dari: {source}\nDisimpan: {filename}"
STATUS_VIDEO_CAPTION = "🎬 Status dari: {source}\nDisimpan: {filename}"

SETNAME_DENIED = "❌ Hanya admin yang bisa mengubah nama grup."
SETNAME_EXAMPLE = "❌ Contoh: .setname Nama Baru"
SETNAME_DONE = "✅ Nama grup berhasil diganti!"
SETNAME_FAILURE = "❌ Gagal mengganti nama grup."

SETDESC_DENIED = "❌ Hanya admin yang bisa mengubah deskripsi."
SETDESC_EXAMPLE = "❌ Contoh: .setdesc Deskripsi Baru"
SETDESC_DONE = "✅ Deskripsi grup berhasil diganti!"
SETDESC_FAILURE = "❌ Gagal mengganti deskripsi grup."

KICK_DENIED = "❌ Hanya admin yang bisa kick."
KICK_NEED_MENTION = "❌ Tag member yang ingin di-kick."
KICK_DONE = "✅ Member berhasil di-kick."
KICK_FAILURE = "❌ Gagal kick member."

TAGALL_DENIED = "❌ Hanya admin yang bisa tag all."
TAGALL_TEXT = "👥 Tag semua member!"

RECOVER_NOTHING = "❌ Tidak ada pesan terhapus yang bisa dipulihkan!"
RECOVER_TEXT = "♻️ Pesan Terhapus:\n\n{text}"
RECOVER_IMAGE_CAPTION = "♻️ Gambar yang terhapus"
RECOVER_VIDEO_CAPTION = "♻️ Video yang terhapus"
RECOVER_UNSUPPORTED = "⚠ Pesan terhapus tidak didukung atau format tidak dikenali."
RECOVER_IMAGE_FAILURE = "❌ Gagal memulihkan gambar terhapus."
RECOVER_VIDEO_FAILURE = "❌ Gagal memulihkan video terhapus."
RECOVER_DOCUMENT_FAILURE = "❌ Gagal memulihkan dokumen terhapus."
RECOVER_AUDIO_FAILURE = "❌ Gagal memulihkan audio terhapus."
RECOVER_STICKER_FAILURE = "❌ Gagal memulihkan stiker terhapus."
RECOVER_FAILURE = "❌ Terjadi kesalahan saat memulihkan pesan terhapus."

WELCOME = "👋 Selamat datang @{user} di *{subject}*!"
WELCOME_FALLBACK_SUBJECT = "grup ini"
GOODBYE = "😢 @{user} keluar dari grup."
PROMOTED = "🔼 @{user} kini menjadi admin."
DEMOTED = "🔽 @{user} tidak lagi admin."

MENU = """
╭───〔 🌟 MENU BOT 〕
│
│ 📌 Fitur Bot
│   *{t}owner*      → Info pemilik bot
│   *{t}bot*        → Info teknis bot
│   *{t}runtime*    → Info sistem & uptime
│
│ 📌 Fitur AI
│   *{t}ai <pertanyaan>* → Chat AI
│
│ 📌 Fitur Media
│   *{t}ttdl <link>*      → Download TikTok
│   *{t}sticker*          → Buat stiker dari gambar/video
│   *{t}s*                → Unduh status WhatsApp (reply status)
│   *{t}k*                → Pulihkan pesan terhapus terakhir
│
│ 📌 Fitur Grup (Admin)
│   *{t}setname <nama>*   → Ganti nama grup
│   *{t}setdesc <desc>*   → Ganti deskripsi grup
│   *{t}kick @user*       → Kick member
│   *{t}tagall*           → Mention semua member
╰────────────────
"""

OWNER_CARD = """
╔═════════════════════
║ 👑 OWNER BOT
╠═════════════════════
║ Nama   : {name}
║ Nomor  : wa.me/{number}
║ Role   : Developer
║ Akses  : Semua fitur & konfigurasi bot
╠═════════════════════
║ 💡 Tip: Gunakan fitur ini hanya jika perlu
╚═════════════════════
"""

BOT_CARD = """
╔════════════════════
║ 🤖 INFORMASI BOT
╠════════════════════
║ Nama Bot      : {name}
║ Versi         : {version}
║ Dibuat Dengan :
║   - Python {python}
║   - Library : Baileys bridge (WhatsApp API)
║   - AI Model: {model}
║   - Database : Memori / File system
║ Platform      : {platform}
╚════════════════════
"""

RUNTIME_CARD = """
╔═════════════════
║ ⏳ BOT RUNTIME
╠═════════════════
║ Uptime       : {uptime}
║ CPU          : {cpu}
║ RAM          : {used_mb}MB / {total_mb}MB
║               [{bar}] {percent}%
║ Platform     : {platform}
║ Python       : {python}
║ Active since : {since}
╚═════════════════
"""
