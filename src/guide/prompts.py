# Prompt templates for the guide backend.
# build_generation_request() is pure: same preferences and language always
# give byte-identical text.

from __future__ import annotations
from dataclasses import dataclass

from .types import GenerationRequest, UserPreferences, DEFAULT_TEMPERATURE


@dataclass(frozen=True)
class Locale:
    code: str
    system_instruction: str
    prompt_template: str
    error_message: str


ZH_SYSTEM_INSTRUCTION = """\
你是一位专业的网络安全工程师和系统管理员。
你的任务是提供一份详尽的、循序渐进的搭建安全 VPN 的技术指南。

请遵循以下规则：
1. 专注于隐私和安全的技术实现。
2. 提供服务器设置的实际 Shell 命令。
3. 解释关键配置文件（如 wg0.conf 或 server.conf）。
4. 包含客户端配置步骤。
5. 简洁但透彻。使用 Markdown 格式。
6. 包含简短的“先决条件”部分（例如：具有公网 IP 的 VPS）。
7. 添加关于遵守当地 VPN 使用法律的简短免责声明。
8. **输出内容必须使用中文。**
"""

ZH_PROMPT_TEMPLATE = """\
创建一个详细的 VPN 搭建指南，规格如下：
- 协议：{protocol}
- 服务器操作系统：{server_os}
- 主要客户端设备：{client_os}

指南结构需符合逻辑：
1. 简介与先决条件
2. 服务器安装命令
3. 服务器配置（密钥生成、配置文件）
4. 防火墙/网络设置（UFW、IP 转发）
5. 针对 {client_os} 的客户端配置
6. 验证与故障排除
"""

EN_SYSTEM_INSTRUCTION = """\
You are a professional network security engineer and system administrator.
Your task is to write a thorough, step-by-step technical guide for building a secure VPN.

Follow these rules:
1. Focus on the privacy and security aspects of the implementation.
2. Give real shell commands for the server setup.
3. Explain the key configuration files (such as wg0.conf or server.conf).
4. Include the client configuration steps.
5. Be concise but complete. Use Markdown formatting.
6. Include a short "Prerequisites" section (for example: a VPS with a public IP).
7. Add a short disclaimer about complying with local laws on VPN usage.
8. **The output must be written in English.**
"""

EN_PROMPT_TEMPLATE = """\
Create a detailed VPN setup guide with the following specification:
- Protocol: {protocol}
- Server operating system: {server_os}
- Primary client device: {client_os}

Structure the guide logically:
1. Introduction and prerequisites
2. Server installation commands
3. Server configuration (key generation, configuration files)
4. Firewall/network setup (UFW, IP forwarding)
5. Client configuration for {client_os}
6. Verification and troubleshooting
"""

LOCALES = {
    "zh": Locale(
        code="zh",
        system_instruction=ZH_SYSTEM_INSTRUCTION,
        prompt_template=ZH_PROMPT_TEMPLATE,
        error_message="与 AI 通信时发生错误。请检查您的 API 密钥并重试。",
    ),
    "en": Locale(
        code="en",
        system_instruction=EN_SYSTEM_INSTRUCTION,
        prompt_template=EN_PROMPT_TEMPLATE,
        error_message="An error occurred while talking to the AI. Please check your API key and try again.",
    ),
}

DEFAULT_LANGUAGE = "zh"


def get_locale(language: str = DEFAULT_LANGUAGE) -> Locale:
    try:
        return LOCALES[language.lower()]
    except KeyError:
        raise ValueError(f"Unsupported guide language {language!r}; expected one of: {', '.join(LOCALES)}") from None


def error_message(language: str = DEFAULT_LANGUAGE) -> str:
    """User-facing text shown instead of a raw backend error."""
    return get_locale(language).error_message


def build_generation_request(prefs: UserPreferences, language: str = DEFAULT_LANGUAGE) -> GenerationRequest:
    locale = get_locale(language)
    prompt = locale.prompt_template.format(
        protocol=prefs.protocol.value,
        server_os=prefs.server_os.value,
        client_os=prefs.client_os.value,
    )
    return GenerationRequest(
        system_instruction=locale.system_instruction,
        prompt=prompt,
        temperature=DEFAULT_TEMPERATURE,
    )
