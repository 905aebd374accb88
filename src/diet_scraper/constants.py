"""Fixed vocabularies shared by both chambers: prefectures, blocks, keywords."""

from __future__ import annotations

# Terminal fallback for anything the scrapers could not resolve.
UNKNOWN = "不明"

# Prefecture names as they appear on the district cells (no 都/道/府/県 suffix).
PREFECTURES: tuple[str, ...] = (
    "北海道",
    "青森",
    "岩手",
    "宮城",
    "秋田",
    "山形",
    "福島",
    "茨城",
    "栃木",
    "群馬",
    "埼玉",
    "千葉",
    "東京",
    "神奈川",
    "新潟",
    "富山",
    "石川",
    "福井",
    "山梨",
    "長野",
    "岐阜",
    "静岡",
    "愛知",
    "三重",
    "滋賀",
    "京都",
    "大阪",
    "兵庫",
    "奈良",
    "和歌山",
    "鳥取",
    "島根",
    "岡山",
    "広島",
    "山口",
    "徳島",
    "香川",
    "愛媛",
    "高知",
    "福岡",
    "佐賀",
    "長崎",
    "熊本",
    "大分",
    "宮崎",
    "鹿児島",
    "沖縄",
)

# Proportional-representation blocks of the House of Representatives.
PROPORTIONAL_BLOCKS: tuple[str, ...] = (
    "北海道",
    "東北",
    "北関東",
    "南関東",
    "東京",
    "北陸信越",
    "東海",
    "近畿",
    "中国",
    "四国",
    "九州",
)

PROPORTIONAL_TAG = "（比）"
PROPORTIONAL_WORD = "比例"

SYLLABARY_LABELS: tuple[str, ...] = (
    "あ行",
    "か行",
    "さ行",
    "た行",
    "な行",
    "は行",
    "ま行",
    "や行",
    "ら行",
    "わ行",
)

HEADER_KEYWORDS: frozenset[str] = frozenset(
    {
        "氏名",
        "議員氏名",
        "ふりがな",
        "フリガナ",
        "読み",
        "よみ",
        "会派",
        "選挙区",
        "政党",
        "都道府県",
    }
)

COUNCILLORS_HEADER_KEYWORDS: frozenset[str] = HEADER_KEYWORDS | {"任期", "任期満了"} | frozenset(
    SYLLABARY_LABELS
)

REPRESENTATIVES_PARTIES: tuple[str, ...] = (
    "自由民主党",
    "立憲民主党",
    "公明党",
    "日本維新の会",
    "日本共産党",
    "国民民主党",
    "れいわ新選組",
    "社会民主党",
    "無所属",
    "無会派",
)

# The councillors roster abbreviates parliamentary groups.
COUNCILLORS_PARTIES: tuple[str, ...] = (
    "自民",
    "立憲",
    "公明",
    "維新",
    "共産",
    "民主",
    "れ新",
    "社民",
    "無所属",
    "無会派",
)

# ── Profile keyword buckets ──────────────────────────────────────────────────

GOVERNMENT_POSITION_KEYWORDS: tuple[str, ...] = ("政務次官", "副大臣", "大臣", "長官", "政務官")
PARTY_POSITION_KEYWORDS: tuple[str, ...] = (
    "部会長",
    "会長",
    "幹事長",
    "代理",
    "本部長",
    "調査会長",
    "総裁",
    "副総裁",
)
DIET_POSITION_KEYWORDS: tuple[str, ...] = (
    "委員長",
    "議長",
    "副議長",
    "議院運営委員長",
    "予算委員長",
    "審査会長",
)

# Kanji numerals used in "当選N回".
KANJI_NUMBERS: dict[str, int] = {
    "一": 1,
    "二": 2,
    "三": 3,
    "四": 4,
    "五": 5,
    "六": 6,
    "七": 7,
    "八": 8,
    "九": 9,
    "十": 10,
    "十一": 11,
    "十二": 12,
    "十三": 13,
    "十四": 14,
    "十五": 15,
    "十六": 16,
    "十七": 17,
    "十八": 18,
    "十九": 19,
    "二十": 20,
}

# Accessibility widget links that show up before the member's own site.
WEBSITE_EXCLUDE = "readspeaker"
