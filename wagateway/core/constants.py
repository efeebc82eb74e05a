"""Fixed texts and protocol constants used across wagateway."""

MESSAGING_PRODUCT = "whatsapp"

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="

SUBSCRIBE_MODE = "subscribe"

# Sent to every non-business sender that writes to the number
DEFAULT_AUTO_REPLY_TEXT = "\n".join(
    [
        "Halo,",
        "Untuk melakukan reservasi silahkan melalui Sobat Bunda dulu ya Bunda. "
        "Sobat Bunda bisa reservasi sejak H-7 sampai hari H!",
        "",
        "*Reservasi lebih mudah dan cepat? Lewat Sobat Bunda aja!*",
        "",
        "Android di Google Playstore: https://s.id/sobatbunda-android",
        "",
        "IOS di Apple Store:",
        "https://s.id/sobatbunda-ios",
        "",
        "Ada kendala? Chat kami di jam operasional WhatsApp pk 08.00-20.00 wita",
    ]
)
