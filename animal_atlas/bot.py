import discord
from discord import app_commands
from discord.ext import commands
import logging
from typing import Any, Dict, Optional
import os
from pathlib import Path

from .config_manager import ConfigManager
from .data_manager import DataManager
from .discovery import DiscoveryService
from .models import CATEGORIES, DIFFICULTIES, QUESTION_TYPES, SEASONS, QuizFilters, QuizQuestion, QuizStats
from .quiz_controller import QuizController
from .quiz_engine import QuizEngine
from .seasonal import SeasonalSelector
from .stats import StatsAggregator
from .storage import FileStore, PersistentStore
from .view_tracker import ViewTracker

SEASON_ICONS = {"spring": "🌸", "summer": "☀️", "fall": "🍂", "winter": "❄️"}


def setup_logging(log_directory: str = "logs", level: int = logging.INFO):
    """Set up console and file logging."""
    logs_dir = Path(log_directory)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(logs_dir / "atlas.log", encoding='utf-8'),
        ]
    )

    error_handler = logging.FileHandler(logs_dir / "errors.log", encoding='utf-8')
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logging.getLogger().addHandler(error_handler)

    # Reduce discord.py noise
    logging.getLogger('discord').setLevel(logging.WARNING)
    logging.getLogger('discord.http').setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def _choices(values):
    return [app_commands.Choice(name=value, value=value) for value in values]


def build_question_embed(question: QuizQuestion, number: int, total: int) -> discord.Embed:
    """Embed presenting a question and its numbered options."""
    embed = discord.Embed(
        title=f"❓ Question {number}/{total}",
        description=question.question,
        color=0x3498db
    )
    options = "\n".join(f"**{i}.** {option}" for i, option in enumerate(question.options, start=1))
    embed.add_field(name="Options", value=options, inline=False)

    if question.media_reference:
        label = "🖼️ Image" if question.type == "image" else "🔊 Sound"
        embed.add_field(name=label, value=question.media_reference, inline=False)

    embed.set_footer(text=f"{question.difficulty.title()} • {question.category} • answer with /answer <number>")
    return embed


def build_stats_embed(stats: QuizStats, title: str = "📊 Lifetime Quiz Stats") -> discord.Embed:
    embed = discord.Embed(title=title, color=0x9b59b6)
    embed.add_field(name="Quizzes", value=str(stats.total_quizzes), inline=True)
    embed.add_field(name="Correct", value=f"{stats.total_correct}/{stats.total_questions}", inline=True)
    embed.add_field(name="Accuracy", value=f"{stats.accuracy}%", inline=True)
    embed.add_field(name="Best Streak", value=f"🔥 {stats.best_streak}", inline=True)
    embed.add_field(name="Last Streak", value=str(stats.current_streak), inline=True)
    if stats.last_played:
        embed.set_footer(text=f"Last played {stats.last_played}")
    return embed


class AtlasBot(commands.Bot):
    """Discord bot for discovering animals and playing quizzes"""

    def __init__(self, config=None, store: Optional[PersistentStore] = None):
        intents = discord.Intents.none()
        intents.guilds = True  # Required for slash commands

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}
        self.store = store

        self.config_manager: Optional[ConfigManager] = None
        self.data_manager: Optional[DataManager] = None
        self.view_tracker: Optional[ViewTracker] = None
        self.seasonal_selector: Optional[SeasonalSelector] = None
        self.discovery: Optional[DiscoveryService] = None
        self.quiz_controller: Optional[QuizController] = None

    async def setup_hook(self):
        """Called when the bot is starting up"""
        logger.info("Setting up bot components...")
        self.build_components()
        await self.setup_commands()
        logger.info("Bot setup completed successfully")

    def build_components(self):
        """Create the discovery and quiz components around one store."""
        self.config_manager = ConfigManager()
        if self.app_config:
            self.config_manager.apply_config(self.app_config)

        if self.store is None:
            self.store = FileStore(self.config_manager.get_storage_directory())

        self.data_manager = DataManager(self.app_config.get('data', {}).get('directory'))
        counts = self.data_manager.load_catalogs()
        logger.info(
            f"Loaded {counts['questions']} questions and {counts['seasonal_animals']} seasonal animals"
        )

        self.view_tracker = ViewTracker(self.store)
        self.seasonal_selector = SeasonalSelector(self.data_manager.seasonal_animals)
        self.discovery = DiscoveryService(self.view_tracker, self.seasonal_selector)
        self.quiz_controller = QuizController(
            QuizEngine(self.data_manager.questions),
            StatsAggregator(self.store),
            self.config_manager,
        )

    async def setup_commands(self):
        """Register all slash commands"""

        @self.tree.command(name="help", description="Display available commands")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="view", description="Record a view of an animal page")
        async def view_command(interaction: discord.Interaction, animal: str):
            await self.handle_view(interaction, animal)

        @self.tree.command(name="trending", description="Most viewed animals of the last 7 days")
        async def trending_command(interaction: discord.Interaction, limit: Optional[int] = None):
            await self.handle_trending(interaction, limit)

        @self.tree.command(name="recent", description="Recently viewed animals")
        async def recent_command(interaction: discord.Interaction, limit: Optional[int] = None):
            await self.handle_recent(interaction, limit)

        @self.tree.command(name="seasonal", description="Animals in the spotlight this season")
        @app_commands.choices(season=_choices(SEASONS))
        async def seasonal_command(
            interaction: discord.Interaction,
            limit: Optional[int] = None,
            season: Optional[app_commands.Choice[str]] = None,
        ):
            await self.handle_seasonal(interaction, limit, season.value if season else None)

        @self.tree.command(name="featured", description="Everything featured on the front page")
        async def featured_command(interaction: discord.Interaction):
            await self.handle_featured(interaction)

        @self.tree.command(name="view_stats", description="Statistics about viewed animals")
        async def view_stats_command(interaction: discord.Interaction):
            await self.handle_view_stats(interaction)

        @self.tree.command(name="clear_history", description="Forget all viewed animals")
        async def clear_history_command(interaction: discord.Interaction):
            await self.handle_clear_history(interaction)

        @self.tree.command(name="quiz", description="Start a custom animal quiz")
        @app_commands.choices(
            difficulty=_choices(DIFFICULTIES),
            category=_choices(CATEGORIES),
            question_type=_choices(QUESTION_TYPES),
        )
        async def quiz_command(
            interaction: discord.Interaction,
            difficulty: Optional[app_commands.Choice[str]] = None,
            category: Optional[app_commands.Choice[str]] = None,
            question_type: Optional[app_commands.Choice[str]] = None,
            count: Optional[int] = None,
        ):
            await self.handle_quiz(
                interaction,
                difficulty.value if difficulty else None,
                category.value if category else None,
                question_type.value if question_type else None,
                count,
            )

        @self.tree.command(name="daily", description="Play today's daily challenge")
        async def daily_command(interaction: discord.Interaction):
            await self.handle_daily(interaction)

        @self.tree.command(name="answer", description="Answer the current question")
        async def answer_command(interaction: discord.Interaction, option: int):
            await self.handle_answer(interaction, option)

        @self.tree.command(name="stop", description="Stop the current quiz without saving")
        async def stop_command(interaction: discord.Interaction):
            await self.handle_stop(interaction)

        @self.tree.command(name="status", description="Show the current quiz progress")
        async def status_command(interaction: discord.Interaction):
            await self.handle_status(interaction)

        @self.tree.command(name="stats", description="Show lifetime quiz statistics")
        async def stats_command(interaction: discord.Interaction):
            await self.handle_stats(interaction)

        logger.info("Slash commands registered successfully")

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    def _resolve_limit(self, limit: Optional[int], default: int) -> Dict[str, Any]:
        if limit is None:
            return {'success': True, 'value': default}
        cm = self.config_manager
        if not cm.MIN_LIST_LIMIT <= limit <= cm.MAX_LIST_LIMIT:
            return {
                'success': False,
                'error': f"Limit must be between {cm.MIN_LIST_LIMIT} and {cm.MAX_LIST_LIMIT}"
            }
        return {'success': True, 'value': limit}

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        try:
            embed = discord.Embed(
                title="🦁 Animal Atlas Commands",
                description="Discover animals and test your knowledge",
                color=0x00ff00
            )
            embed.add_field(
                name="🔍 Discovery",
                value=(
                    "`/view <animal>` - Record a view of an animal\n"
                    "`/trending [limit]` - Most viewed animals this week\n"
                    "`/recent [limit]` - Recently viewed animals\n"
                    "`/seasonal [limit] [season]` - Seasonal spotlight\n"
                    "`/featured` - Front page picks\n"
                    "`/view_stats` - View statistics\n"
                    "`/clear_history` - Forget viewed animals"
                ),
                inline=False
            )
            embed.add_field(
                name="🎯 Quiz",
                value=(
                    "`/quiz [difficulty] [category] [question_type] [count]` - Custom quiz\n"
                    "`/daily` - Today's daily challenge, the same for everyone\n"
                    "`/answer <number>` - Answer the current question\n"
                    "`/stop` - Stop the current quiz\n"
                    "`/status` - Quiz progress\n"
                    "`/stats` - Lifetime quiz statistics"
                ),
                inline=False
            )
            embed.add_field(
                name="⚙️ Current Settings",
                value=f"```\n{self.config_manager.get_settings_summary()}\n```",
                inline=False
            )
            if self.data_manager.has_load_errors():
                embed.add_field(
                    name="⚠️ Loading Issues",
                    value="Some catalog entries had loading errors. Check logs for details.",
                    inline=False
                )
            await interaction.response.send_message(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Error in help command: {e}")
            await self.send_error_response(interaction, "Failed to display help", "❌ Help Error")

    async def handle_view(self, interaction: discord.Interaction, animal: str):
        """Handle /view command"""
        name = animal.strip()
        if not name:
            await self.send_error_response(interaction, "Please provide an animal name.", "❌ Invalid Animal")
            return

        self.view_tracker.track_view(name)
        await self.send_info_response(interaction, f"Recorded a view of **{name}**.", "👀 View Recorded")

    async def handle_trending(self, interaction: discord.Interaction, limit: Optional[int] = None):
        """Handle /trending command"""
        resolved = self._resolve_limit(limit, self.config_manager.get_settings().trending_limit)
        if not resolved['success']:
            await self.send_error_response(interaction, resolved['error'], "❌ Invalid Limit")
            return

        animals = self.view_tracker.get_trending_animals(resolved['value'])
        embed = discord.Embed(
            title="🔥 Trending Animals",
            description="\n".join(f"**{i}.** {name}" for i, name in enumerate(animals, start=1)),
            color=0xe67e22
        )
        embed.set_footer(text="Based on views in the last 7 days")
        await interaction.response.send_message(embed=embed)

    async def handle_recent(self, interaction: discord.Interaction, limit: Optional[int] = None):
        """Handle /recent command"""
        resolved = self._resolve_limit(limit, self.config_manager.get_settings().recent_limit)
        if not resolved['success']:
            await self.send_error_response(interaction, resolved['error'], "❌ Invalid Limit")
            return

        animals = self.view_tracker.get_recently_viewed(resolved['value'])
        if not animals:
            await self.send_info_response(
                interaction, "No animals viewed yet. Use `/view <animal>` to start exploring.", "🕒 Recently Viewed"
            )
            return

        embed = discord.Embed(
            title="🕒 Recently Viewed",
            description="\n".join(f"• {name}" for name in animals),
            color=0x6699ff
        )
        await interaction.response.send_message(embed=embed)

    async def handle_seasonal(
        self,
        interaction: discord.Interaction,
        limit: Optional[int] = None,
        season: Optional[str] = None,
    ):
        """Handle /seasonal command"""
        resolved = self._resolve_limit(limit, self.config_manager.get_settings().seasonal_limit)
        if not resolved['success']:
            await self.send_error_response(interaction, resolved['error'], "❌ Invalid Limit")
            return

        if season:
            # Whole roster of the requested season, in catalog order
            entries = self.seasonal_selector.get_entries_for_season(season)[:resolved['value']]
        else:
            season = self.seasonal_selector.get_current_season()
            entries = self.seasonal_selector.get_seasonal_animals(resolved['value'])

        embed = discord.Embed(
            title=f"{SEASON_ICONS[season]} {season.title()} Spotlight",
            color=0x2ecc71
        )
        if not entries:
            embed.description = "No seasonal animals for this month."
        for entry in entries:
            embed.add_field(
                name=f"{entry.name} (*{entry.scientific_name}*)",
                value=entry.reason,
                inline=False
            )
        await interaction.response.send_message(embed=embed)

    async def handle_featured(self, interaction: discord.Interaction):
        """Handle /featured command"""
        settings = self.config_manager.get_settings()
        featured = self.discovery.get_featured(
            trending_limit=settings.trending_limit,
            seasonal_limit=settings.seasonal_limit,
            recent_limit=settings.recent_limit,
            suggestion_limit=settings.suggestion_limit,
        )

        embed = discord.Embed(
            title="🌍 Featured Animals",
            description=f"Animal of the hour: **{featured['animal_of_the_hour']}**",
            color=0x1abc9c
        )
        embed.add_field(name="🔥 Trending", value=", ".join(featured['trending']), inline=False)
        season = featured['season']
        embed.add_field(
            name=f"{SEASON_ICONS[season]} {season.title()}",
            value=", ".join(entry.name for entry in featured['seasonal']) or "None this month",
            inline=False
        )
        if featured['recently_viewed']:
            embed.add_field(name="🕒 Recently Viewed", value=", ".join(featured['recently_viewed']), inline=False)
        embed.add_field(name="✨ Discover", value=", ".join(featured['suggestions']) or "Seen them all!", inline=False)
        await interaction.response.send_message(embed=embed)

    async def handle_view_stats(self, interaction: discord.Interaction):
        """Handle /view_stats command"""
        stats = self.view_tracker.get_view_stats()
        embed = discord.Embed(title="📈 View Statistics", color=0x6699ff)
        embed.add_field(name="Total Views", value=str(stats['total_views']), inline=True)
        embed.add_field(name="Unique Animals", value=str(stats['unique_animals']), inline=True)
        most_viewed = stats['most_viewed']
        embed.add_field(
            name="Most Viewed",
            value=f"{most_viewed['name']} ({most_viewed['count']})" if most_viewed else "Nothing yet",
            inline=True
        )
        await interaction.response.send_message(embed=embed)

    async def handle_clear_history(self, interaction: discord.Interaction):
        """Handle /clear_history command"""
        self.view_tracker.clear_view_history()
        await self.send_info_response(interaction, "View history cleared.", "🧹 History Cleared")

    async def handle_quiz(
        self,
        interaction: discord.Interaction,
        difficulty: Optional[str] = None,
        category: Optional[str] = None,
        question_type: Optional[str] = None,
        count: Optional[int] = None,
    ):
        """Handle /quiz command"""
        if count is not None:
            validation = self.config_manager._validate_int(
                count, "Question count",
                self.config_manager.MIN_QUESTION_COUNT, self.config_manager.MAX_QUESTION_COUNT
            )
            if validation:
                await self.send_error_response(interaction, validation['user_message'], "❌ Invalid Count")
                return

        try:
            filters = QuizFilters(difficulty=difficulty, category=category, type=question_type)
        except ValueError as e:
            await self.send_error_response(interaction, str(e), "❌ Invalid Filter")
            return

        result = self.quiz_controller.start_quiz(interaction.channel_id, filters, count)
        await self._send_quiz_start(interaction, result, f"🎯 Quiz Started ({filters.describe()})")

    async def handle_daily(self, interaction: discord.Interaction):
        """Handle /daily command"""
        result = self.quiz_controller.start_daily(interaction.channel_id)
        await self._send_quiz_start(interaction, result, "🌟 Daily Challenge")

    async def _send_quiz_start(self, interaction: discord.Interaction, result: Dict[str, Any], title: str):
        if not result['success']:
            await self.send_warning_response(interaction, result['message'], "⚠️ Cannot Start Quiz")
            return

        info = result['session_info']
        await interaction.response.send_message(
            content=f"**{title}** - {info['total_questions']} questions",
            embed=build_question_embed(result['question'], 1, info['total_questions'])
        )

    async def handle_answer(self, interaction: discord.Interaction, option: int):
        """Handle /answer command"""
        result = self.quiz_controller.answer(interaction.channel_id, option)
        if not result['success']:
            await self.send_warning_response(interaction, result['message'], "⚠️ Cannot Answer")
            return

        if result['correct']:
            verdict = f"✅ Correct! **{result['correct_option']}**"
            if result['current_streak'] > 1:
                verdict += f" 🔥 {result['current_streak']} streak"
        else:
            verdict = f"❌ Not quite. The answer was **{result['correct_option']}**"

        reveal = discord.Embed(
            description=f"{verdict}\n\n{result['explanation']}",
            color=0x00ff00 if result['correct'] else 0xff0000
        )

        if result['completed']:
            summary = build_stats_embed(
                result['stats'],
                title=f"🏁 Quiz Complete: {result['score']}/{result['total_questions']}"
            )
            summary.description = f"Best streak this quiz: {result['best_streak']}"
            await interaction.response.send_message(embeds=[reveal, summary])
            return

        progress = result['progress']
        await interaction.response.send_message(embeds=[
            reveal,
            build_question_embed(
                result['next_question'], progress['current_question'], progress['total_questions']
            ),
        ])

    async def handle_stop(self, interaction: discord.Interaction):
        """Handle /stop command"""
        result = self.quiz_controller.stop_quiz(interaction.channel_id)
        if not result['success']:
            await self.send_warning_response(interaction, result['message'], "⚠️ No Active Quiz")
            return

        await self.send_info_response(
            interaction,
            f"{result['message']}\nScore: {result['score']}/{result['answered']} answered "
            f"of {result['total_questions']}",
            "🛑 Quiz Stopped"
        )

    async def handle_status(self, interaction: discord.Interaction):
        """Handle /status command"""
        summary = self.quiz_controller.get_session_status_summary(interaction.channel_id)
        embed = discord.Embed(title="📋 Quiz Status", description=summary, color=0x6699ff)
        if not self.quiz_controller.has_active_session(interaction.channel_id):
            embed.add_field(
                name="🚀 Start a Quiz",
                value="Use `/quiz` or `/daily` to begin",
                inline=False
            )
        await interaction.response.send_message(embed=embed)

    async def handle_stats(self, interaction: discord.Interaction):
        """Handle /stats command"""
        stats = self.quiz_controller.get_lifetime_stats()
        await interaction.response.send_message(embed=build_stats_embed(stats))

    async def _send_embed(self, interaction: discord.Interaction, embed: discord.Embed):
        if interaction.response.is_done():
            await interaction.followup.send(embed=embed, ephemeral=True)
        else:
            await interaction.response.send_message(embed=embed, ephemeral=True)

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        try:
            embed = discord.Embed(title=title, description=message, color=0xff0000)
            embed.set_footer(text="If this error persists, try using /help for available commands")
            await self._send_embed(interaction, embed)
        except discord.HTTPException:
            logger.error("Failed to send error response to user")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        try:
            await self._send_embed(interaction, discord.Embed(title=title, description=message, color=0x6699ff))
        except discord.HTTPException:
            logger.error("Failed to send info response to user")

    async def send_warning_response(self, interaction: discord.Interaction, message: str, title: str = "⚠️ Warning"):
        """Send formatted warning response to user"""
        try:
            await self._send_embed(interaction, discord.Embed(title=title, description=message, color=0xffaa00))
        except discord.HTTPException:
            logger.error("Failed to send warning response to user")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = AtlasBot(config)

    try:
        logger.info("Starting Animal Atlas bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()
